"""Load a ``WadCfg`` diagnostics fragment from a file or string.

The fragment is the provider-defined ``DiagnosticMonitorConfiguration``
XML describing which logs and counters the agent collects.  It is
parsed with the same hardened parser as configuration documents, with
ignorable whitespace removed so that fragments compare cleanly after a
round trip.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from lxml import etree

from vm_diagnostics.builder import make_parser
from vm_diagnostics.core.exceptions import ConfigParseError, InvalidArgumentError

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger("vm_diagnostics.activities.load_configuration")


def parse_diagnostics_fragment(text: str | bytes) -> _Element:
    """Parse *text* into a diagnostics fragment element.

    Raises:
        ConfigParseError: If *text* is empty or not well-formed XML.
    """
    if not text or not text.strip():
        msg = "Diagnostics configuration is empty"
        raise ConfigParseError(msg, stage="load_configuration")

    content = text.encode("utf-8") if isinstance(text, str) else text
    try:
        return etree.fromstring(content.strip(), parser=make_parser())
    except etree.XMLSyntaxError as exc:
        msg = f"Diagnostics configuration is not valid XML: {exc}"
        raise ConfigParseError(msg, stage="load_configuration") from exc


def load_diagnostics_fragment(path: Path | str) -> _Element:
    """Read and parse a diagnostics configuration file.

    Raises:
        InvalidArgumentError: If the file does not exist or cannot be read.
        ConfigParseError: If the file is empty or not well-formed XML.
    """
    path = Path(path)
    try:
        content = path.read_bytes()
    except OSError as exc:
        msg = f"Cannot read diagnostics configuration file {path}: {exc}"
        raise InvalidArgumentError(
            msg, argument="diagnostics_configuration_file", stage="load_configuration"
        ) from exc

    fragment = parse_diagnostics_fragment(content)
    logger.info(
        "Loaded diagnostics configuration | file=%s | root=%s",
        path.name,
        etree.QName(fragment).localname,
    )
    return fragment
