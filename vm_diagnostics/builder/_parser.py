"""Parse a configuration document back into a ``BuilderState``.

Elements are located by local name anywhere in the document, so a
document produced by an older tool revision with slightly different
nesting still parses.  Only the account name is recovered from the
connection string; the key stays in the document.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lxml import etree

from vm_diagnostics.builder._state import BuilderState
from vm_diagnostics.builder._xml import detach_fragment, find_by_local_name, make_parser
from vm_diagnostics.core.constants import DIAGNOSTICS_EXTENSION, DIAGNOSTICS_NAMESPACE
from vm_diagnostics.core.exceptions import ConfigParseError
from vm_diagnostics.models.connection_string import StorageConnectionString

if TYPE_CHECKING:
    from lxml.etree import _Element

    from vm_diagnostics.core.constants import ExtensionDescriptor
    from vm_diagnostics.models.extension import ExtensionReference

logger = logging.getLogger("vm_diagnostics.builder")

_BOOLEANS = {"true": True, "false": False}


def parse_document(text: str | bytes) -> BuilderState:
    """Parse configuration document text.

    Raises:
        ConfigParseError: If the text is empty or not well-formed XML, the
            ``Enabled`` element is missing or not a boolean, the connection
            string is malformed, or an enabled document has no ``WadCfg``
            content.
    """
    root = _parse_xml(text)
    # The caller's fragment lives under WadCfg and is never searched for
    # document elements.
    wad_cfg = find_by_local_name(root, "WadCfg")

    enabled = _parse_enabled(root, wad_cfg)
    if not enabled:
        logger.debug("Parsed diagnostics document | enabled=False")
        return BuilderState(enabled=False)

    account_name = ""
    connection_string = ""
    connection_elem = find_by_local_name(
        root, "StorageAccountConnectionString", exclude=wad_cfg
    )
    if connection_elem is not None:
        connection_string = (connection_elem.text or "").strip()
        account_name = StorageConnectionString.parse(connection_string).account_name

    fragment = _parse_wad_cfg(wad_cfg)

    logger.debug(
        "Parsed diagnostics document | enabled=True | account=%s",
        account_name,
    )

    return BuilderState(
        enabled=True,
        storage_account_name=account_name,
        diagnostics_fragment=fragment,
        storage_connection_string=connection_string,
    )


def parse_extension_reference(
    reference: ExtensionReference,
    descriptor: ExtensionDescriptor = DIAGNOSTICS_EXTENSION,
) -> BuilderState:
    """Parse the configuration document carried by *reference*.

    Raises:
        ConfigParseError: If the reference has no configuration parameter
            or its document does not parse.
    """
    parameter = reference.get_parameter(descriptor.parameter_key)
    if parameter is None:
        msg = (
            f"Extension reference {reference.reference_name!r} has no "
            f"{descriptor.parameter_key} parameter"
        )
        raise ConfigParseError(msg, code="CONFIG_PARAMETER_MISSING")
    return parse_document(parameter.value)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _parse_xml(text: str | bytes) -> _Element:
    if not isinstance(text, str | bytes):
        msg = f"Configuration document must be text, got {type(text).__name__}"
        raise ConfigParseError(msg)
    if not text.strip():
        msg = "Configuration document is empty"
        raise ConfigParseError(msg)

    content = text.encode("utf-8") if isinstance(text, str) else text
    try:
        return etree.fromstring(content.strip(), parser=make_parser())
    except etree.XMLSyntaxError as exc:
        msg = f"Configuration document is not valid XML: {exc}"
        raise ConfigParseError(msg) from exc


def _parse_enabled(root: _Element, wad_cfg: _Element | None) -> bool:
    enabled_elem = find_by_local_name(root, "Enabled", exclude=wad_cfg)
    if enabled_elem is None:
        msg = "Configuration document has no Enabled element"
        raise ConfigParseError(msg)

    raw = (enabled_elem.text or "").strip()
    try:
        return _BOOLEANS[raw.lower()]
    except KeyError:
        msg = f"Enabled must be 'true' or 'false', got {raw!r}"
        raise ConfigParseError(msg) from None


def _parse_wad_cfg(wad_cfg: _Element | None) -> _Element:
    if wad_cfg is None:
        msg = "Enabled configuration document has no WadCfg element"
        raise ConfigParseError(msg)

    content = next(wad_cfg.iterchildren(etree.Element), None)
    if content is None:
        msg = "WadCfg element has no diagnostics configuration"
        raise ConfigParseError(msg)

    return detach_fragment(content, DIAGNOSTICS_NAMESPACE)
