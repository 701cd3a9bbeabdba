"""Diagnostics extension configuration document builder.

Builds the public configuration document of the IaaS diagnostics
agent from structured fields and parses such a document back.

The package is split into focused stages:
- **_state**: ``BuilderState`` and field validation
- **_document**: state → XML document text, extension-reference wrapping
- **_parser**: XML document text → state
- **_xml**: lxml helpers (hardened parser, namespace splicing, comparison)

Round-trip guarantee: parsing a built document recovers ``enabled``,
the storage account name and a fragment structurally equal to the one
supplied.  The account key and explicit endpoints are not recovered.
"""

from __future__ import annotations

from vm_diagnostics.builder._document import (
    XML_DECLARATION,
    to_document,
    wrap_as_extension_reference,
)
from vm_diagnostics.builder._parser import parse_document, parse_extension_reference
from vm_diagnostics.builder._state import BuilderState, build_from_fields
from vm_diagnostics.builder._xml import elements_equal, make_parser
from vm_diagnostics.core.exceptions import ConfigParseError, InvalidArgumentError

ParseError = ConfigParseError
parse = parse_document

__all__ = [
    "XML_DECLARATION",
    "BuilderState",
    "ConfigParseError",
    "InvalidArgumentError",
    "ParseError",
    "build_from_fields",
    "elements_equal",
    "make_parser",
    "parse",
    "parse_document",
    "parse_extension_reference",
    "to_document",
    "wrap_as_extension_reference",
]
