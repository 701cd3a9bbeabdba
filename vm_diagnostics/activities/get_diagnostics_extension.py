"""Get diagnostics extension activity: read the agent settings of a VM role."""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING

from vm_diagnostics.builder import parse_document
from vm_diagnostics.core.constants import DIAGNOSTICS_EXTENSION
from vm_diagnostics.models.extension import DiagnosticsExtensionContext

if TYPE_CHECKING:
    from vm_diagnostics.models.extension import ExtensionReference, VirtualMachine

logger = logging.getLogger("vm_diagnostics.activities.get_diagnostics_extension")


def get_diagnostics_extension(vm: VirtualMachine) -> list[DiagnosticsExtensionContext]:
    """Return one context per diagnostics extension reference on *vm*.

    A reference without a configuration parameter is reported as
    disabled with no account and no fragment. Each context owns its
    fragment tree.

    Raises:
        ConfigParseError: If a stored configuration document is malformed.
    """
    contexts = [
        _to_context(r)
        for r in vm.resource_extension_references
        if DIAGNOSTICS_EXTENSION.matches(r.publisher, r.name)
    ]
    logger.info(
        "Diagnostics extensions read | role=%s | count=%d",
        vm.role_name,
        len(contexts),
    )
    return contexts


def _to_context(reference: ExtensionReference) -> DiagnosticsExtensionContext:
    parameter = reference.get_parameter(DIAGNOSTICS_EXTENSION.parameter_key)
    if parameter is None:
        logger.warning(
            "Diagnostics extension has no configuration | reference=%s",
            reference.reference_name,
        )
        return DiagnosticsExtensionContext(
            name=reference.name,
            publisher=reference.publisher,
            reference_name=reference.reference_name,
            version=reference.version,
        )

    state = parse_document(parameter.value)
    return DiagnosticsExtensionContext(
        name=reference.name,
        publisher=reference.publisher,
        reference_name=reference.reference_name,
        version=reference.version,
        enabled=state.enabled,
        storage_account_name=state.storage_account_name,
        diagnostics_fragment=copy.deepcopy(state.diagnostics_fragment),
    )
