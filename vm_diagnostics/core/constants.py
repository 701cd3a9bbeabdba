"""Shared constants: single source of truth.

Centralises the diagnostics extension identity, the public configuration
XML namespace, storage endpoint defaults and upload container names.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Extension identity
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ExtensionDescriptor:
    """Identity of a VM extension type.

    Attributes:
        publisher: Extension publisher (e.g. ``Microsoft.Compute``).
        name: Extension name as known to the extension host.
        reference_name: Default reference name attached to the VM role.
        version: Extension version string.
        parameter_key: Key under which the configuration document is
            stored in the extension reference's parameter list.
    """

    publisher: str
    name: str
    reference_name: str
    version: str
    parameter_key: str

    def matches(self, publisher: str, name: str) -> bool:
        """Return ``True`` if *publisher*/*name* identify this extension."""
        return publisher == self.publisher and name == self.name


DIAGNOSTICS_EXTENSION = ExtensionDescriptor(
    publisher="Microsoft.Compute",
    name="DiagnosticsAgent",
    reference_name="MyDiagnosticsAgent",
    version="0.1",
    parameter_key="DiagnosticsAgentConfigParameter",
)
"""The IaaS diagnostics agent extension."""

# ---------------------------------------------------------------------------
# Public configuration document
# ---------------------------------------------------------------------------

DIAGNOSTICS_NAMESPACE: str = (
    "http://schemas.microsoft.com/ServiceHosting/2010/10/DiagnosticsConfiguration"
)
"""Namespace of every element under ``PublicConfig``."""

# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

DEFAULT_ENDPOINTS_PROTOCOL: str = "https"

DEFAULT_ENDPOINT_SUFFIX: str = "core.windows.net"
"""DNS suffix used to derive default blob/queue/table endpoints."""

ENDPOINT_COUNT: int = 3
"""Explicit endpoints are always blob, queue, table, in that order."""

DEFAULT_UPLOAD_CONTAINER: str = "azpsnode122011"
"""Blob container that receives uploaded packages."""

STORAGE_RESOURCE_NAME_RE = re.compile(r"^[a-z0-9](?!.*--)[a-z0-9-]{1,61}[a-z0-9]$")
"""Blob container and file share names: 3-63 lowercase letters, digits or
single hyphens, starting and ending with a letter or digit."""
