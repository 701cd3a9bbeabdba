"""Set diagnostics extension activity: attach the agent to a VM role.

Builds the configuration document from storage credentials and a
``WadCfg`` fragment, wraps it in an extension reference and returns a
copy of the role with that reference attached.  Any diagnostics
reference already on the role is replaced; other extensions are kept
in their original order.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from vm_diagnostics.activities.load_configuration import load_diagnostics_fragment
from vm_diagnostics.builder import build_from_fields, wrap_as_extension_reference
from vm_diagnostics.core.config import DiagnosticsConfig
from vm_diagnostics.core.constants import DIAGNOSTICS_EXTENSION
from vm_diagnostics.core.exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from lxml.etree import _Element

    from vm_diagnostics.models.extension import VirtualMachine

logger = logging.getLogger("vm_diagnostics.activities.set_diagnostics_extension")


def set_diagnostics_extension(
    vm: VirtualMachine,
    *,
    storage_account_name: str | None = None,
    storage_account_key: str | None = None,
    diagnostics_fragment: _Element | None = None,
    diagnostics_configuration_file: Path | str | None = None,
    endpoints: Sequence[str] | None = None,
    disabled: bool = False,
    config: DiagnosticsConfig | None = None,
) -> VirtualMachine:
    """Return *vm* with a diagnostics extension reference attached.

    Args:
        vm: The VM role to configure.
        storage_account_name: Account receiving diagnostics data.
        storage_account_key: Access key of that account.
        diagnostics_fragment: Parsed ``WadCfg`` fragment.
        diagnostics_configuration_file: File to load the fragment from when
            *diagnostics_fragment* is not given.
        endpoints: Optional explicit blob, queue and table endpoints.
        disabled: Attach the extension in the disabled state.
        config: Supplies the account and the configuration file when the
            matching arguments are not given.

    Raises:
        InvalidArgumentError: If the guest agent is not provisioned, both
            a fragment and a file are given, or a required field is missing.
        ConfigParseError: If the configuration file is not valid XML.
    """
    if not vm.provision_guest_agent:
        msg = "ProvisionGuestAgent must be enabled for setting diagnostics extensions on the VM."
        raise InvalidArgumentError(
            msg, argument="provision_guest_agent", stage="set_diagnostics_extension"
        )

    if diagnostics_fragment is not None and diagnostics_configuration_file:
        msg = "Specify either a diagnostics configuration or a configuration file, not both"
        raise InvalidArgumentError(
            msg, argument="diagnostics_configuration_file", stage="set_diagnostics_extension"
        )

    cfg = config or DiagnosticsConfig()

    fragment = diagnostics_fragment
    if fragment is None and not disabled:
        path = diagnostics_configuration_file or cfg.configuration_file
        if path:
            fragment = load_diagnostics_fragment(path)

    state = build_from_fields(
        storage_account_name or cfg.storage_account_name,
        storage_account_key or cfg.storage_account_key,
        endpoints,
        fragment,
        enabled=not disabled,
    )
    reference = wrap_as_extension_reference(state)

    kept = tuple(
        r
        for r in vm.resource_extension_references
        if not DIAGNOSTICS_EXTENSION.matches(r.publisher, r.name)
    )
    replaced = len(vm.resource_extension_references) - len(kept)

    logger.info(
        "Diagnostics extension set | role=%s | enabled=%s | account=%s | replaced=%d",
        vm.role_name,
        state.enabled,
        state.storage_account_name,
        replaced,
    )

    return vm.with_references((*kept, reference))
