"""Data models and schemas.

Defines the data structures used around the configuration builder:
- StorageConnectionString / StorageEndpoints: storage account identity
- ExtensionReference / ExtensionParameter: generic VM extension records
- VirtualMachine: VM role model the activities operate on
- DiagnosticsExtensionContext: diagnostics settings read from a role
"""

from vm_diagnostics.models.connection_string import (
    StorageConnectionString,
    StorageEndpoints,
    parse_settings,
)
from vm_diagnostics.models.extension import (
    DiagnosticsExtensionContext,
    ExtensionParameter,
    ExtensionReference,
    VirtualMachine,
)

__all__ = [
    "DiagnosticsExtensionContext",
    "ExtensionParameter",
    "ExtensionReference",
    "StorageConnectionString",
    "StorageEndpoints",
    "VirtualMachine",
    "parse_settings",
]
