"""Serialise a ``BuilderState`` to the public configuration document.

Wire format::

    <?xml version="1.0" encoding="utf-8"?>
    <Configuration>
      <Enabled>true</Enabled>
      <Public>
        <PublicConfig xmlns="http://schemas.microsoft.com/ServiceHosting/2010/10/DiagnosticsConfiguration">
          <WadCfg>...caller fragment...</WadCfg>
          <StorageAccountConnectionString>DefaultEndpointsProtocol=...</StorageAccountConnectionString>
        </PublicConfig>
      </Public>
    </Configuration>

A disabled state produces only the ``Enabled`` element.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lxml import etree

from vm_diagnostics.builder._state import validate_for_serialisation
from vm_diagnostics.builder._xml import splice_fragment
from vm_diagnostics.core.constants import (
    DIAGNOSTICS_EXTENSION,
    DIAGNOSTICS_NAMESPACE,
    ExtensionDescriptor,
)
from vm_diagnostics.models.extension import ExtensionParameter, ExtensionReference

if TYPE_CHECKING:
    from vm_diagnostics.builder._state import BuilderState

logger = logging.getLogger("vm_diagnostics.builder")

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'


def to_document(state: BuilderState) -> str:
    """Render *state* as configuration document text.

    Deterministic: identical states always produce identical text.

    Raises:
        InvalidArgumentError: If *state* is enabled but lacks the account
            name, the account key or the diagnostics fragment.
    """
    validate_for_serialisation(state)

    root = etree.Element("Configuration")
    etree.SubElement(root, "Enabled").text = "true" if state.enabled else "false"

    if state.enabled:
        public = etree.SubElement(root, "Public")
        public_config = etree.SubElement(
            public,
            f"{{{DIAGNOSTICS_NAMESPACE}}}PublicConfig",
            nsmap={None: DIAGNOSTICS_NAMESPACE},
        )
        wad_cfg = etree.SubElement(public_config, f"{{{DIAGNOSTICS_NAMESPACE}}}WadCfg")
        connection = etree.SubElement(
            public_config, f"{{{DIAGNOSTICS_NAMESPACE}}}StorageAccountConnectionString"
        )

        splice_fragment(wad_cfg, state.diagnostics_fragment)  # type: ignore[arg-type]
        connection.text = state.connection_string.format()

    body = etree.tostring(root, encoding="unicode", pretty_print=True)

    logger.debug(
        "Rendered diagnostics document | enabled=%s | account=%s | length=%d",
        state.enabled,
        state.storage_account_name,
        len(body),
    )

    return f"{XML_DECLARATION}\n{body.rstrip()}"


def wrap_as_extension_reference(
    state: BuilderState,
    descriptor: ExtensionDescriptor = DIAGNOSTICS_EXTENSION,
) -> ExtensionReference:
    """Wrap the document for *state* in an extension reference.

    The reference carries exactly one parameter, keyed by the
    descriptor's ``parameter_key``.
    """
    return ExtensionReference(
        reference_name=descriptor.reference_name,
        publisher=descriptor.publisher,
        name=descriptor.name,
        version=descriptor.version,
        parameters=(ExtensionParameter(key=descriptor.parameter_key, value=to_document(state)),),
    )
