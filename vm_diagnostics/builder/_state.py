"""Builder state and field validation.

A ``BuilderState`` is created once, either from explicit fields via
``build_from_fields`` or by parsing an existing document, and is not
mutated afterwards.  The diagnostics fragment it holds is a private
copy of the caller's element, so later changes to either tree never
leak into the other.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from lxml import etree

from vm_diagnostics.core.exceptions import InvalidArgumentError
from vm_diagnostics.models.connection_string import StorageConnectionString, StorageEndpoints

if TYPE_CHECKING:
    from lxml.etree import _Element, _ElementTree

    from vm_diagnostics.models.extension import ExtensionReference

logger = logging.getLogger("vm_diagnostics.builder")


@dataclass(frozen=True, slots=True)
class BuilderState:
    """Structured contents of a diagnostics extension configuration document.

    Attributes:
        enabled: Whether the extension is active.
        storage_account_name: Account receiving diagnostics data.
        storage_account_key: Access key of that account. Empty after parsing;
            the key is never read back out of a document.
        endpoints: Explicit blob/queue/table endpoints, or ``None`` for the
            default endpoints of the account.
        diagnostics_fragment: The ``WadCfg`` fragment (unqualified form).
            Freezing the state does not freeze this lxml tree; copy it
            before handing it to code that may modify it.
        storage_connection_string: Raw connection string; only set when the
            state was parsed from a document.
    """

    enabled: bool
    storage_account_name: str = ""
    storage_account_key: str = field(default="", repr=False)
    endpoints: StorageEndpoints | None = None
    diagnostics_fragment: _Element | None = field(default=None, compare=False, repr=False)
    storage_connection_string: str = field(default="", repr=False)

    @property
    def connection_string(self) -> StorageConnectionString:
        """Connection string built from the account fields."""
        return StorageConnectionString(
            account_name=self.storage_account_name,
            account_key=self.storage_account_key,
            endpoints=self.endpoints,
        )

    def to_document(self) -> str:
        from vm_diagnostics.builder._document import to_document

        return to_document(self)

    def to_extension_reference(self) -> ExtensionReference:
        from vm_diagnostics.builder._document import wrap_as_extension_reference

        return wrap_as_extension_reference(self)

    @classmethod
    def from_document(cls, text: str | bytes) -> BuilderState:
        from vm_diagnostics.builder._parser import parse_document

        return parse_document(text)

    @classmethod
    def from_extension_reference(cls, reference: ExtensionReference) -> BuilderState:
        from vm_diagnostics.builder._parser import parse_extension_reference

        return parse_extension_reference(reference)


def build_from_fields(
    account_name: str | None,
    account_key: str | None,
    endpoints: Sequence[str] | StorageEndpoints | None = None,
    diagnostics_fragment: _Element | _ElementTree | None = None,
    enabled: bool = True,
) -> BuilderState:
    """Validate explicit fields and return a ``BuilderState``.

    Args:
        account_name: Storage account name; required when *enabled*.
        account_key: Storage account key; required when *enabled*.
        endpoints: ``None`` or exactly three (blob, queue, table) URIs.
        diagnostics_fragment: Parsed ``WadCfg`` element; required when
            *enabled*. The state keeps a copy.
        enabled: Whether the extension is active.

    Raises:
        InvalidArgumentError: If a required field is missing for an
            enabled extension, or *endpoints* does not hold three entries.
    """
    resolved_endpoints = _coerce_endpoints(endpoints)
    fragment = _coerce_fragment(diagnostics_fragment)

    if enabled:
        _require_enabled_fields(account_name, account_key, fragment)

    logger.debug(
        "Built diagnostics state | enabled=%s | account=%s | explicit_endpoints=%s",
        enabled,
        account_name or "",
        resolved_endpoints is not None,
    )

    return BuilderState(
        enabled=bool(enabled),
        storage_account_name=account_name or "",
        storage_account_key=account_key or "",
        endpoints=resolved_endpoints,
        diagnostics_fragment=copy.deepcopy(fragment) if fragment is not None else None,
    )


def validate_for_serialisation(state: BuilderState) -> None:
    """Check the enabled-state invariants before a document is produced.

    Raises:
        InvalidArgumentError: If an enabled state lacks credentials or a
            fragment (e.g. a parsed state, which never carries the key).
    """
    if state.enabled:
        _require_enabled_fields(
            state.storage_account_name,
            state.storage_account_key,
            state.diagnostics_fragment,
        )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _require_enabled_fields(
    account_name: str | None,
    account_key: str | None,
    fragment: _Element | None,
) -> None:
    if not account_name:
        msg = "Storage account name is required when diagnostics are enabled"
        raise InvalidArgumentError(msg, argument="account_name", stage="build_config")
    if not account_key:
        msg = "Storage account key is required when diagnostics are enabled"
        raise InvalidArgumentError(msg, argument="account_key", stage="build_config")
    if fragment is None:
        msg = "Diagnostics configuration is required when diagnostics are enabled"
        raise InvalidArgumentError(msg, argument="diagnostics_fragment", stage="build_config")


def _coerce_endpoints(
    endpoints: Sequence[str] | StorageEndpoints | None,
) -> StorageEndpoints | None:
    if endpoints is None or isinstance(endpoints, StorageEndpoints):
        return endpoints
    if isinstance(endpoints, str):
        return StorageEndpoints.from_sequence(endpoints)
    return StorageEndpoints.from_sequence(tuple(endpoints))


def _coerce_fragment(fragment: _Element | _ElementTree | None) -> _Element | None:
    if fragment is None:
        return None
    if isinstance(fragment, etree._ElementTree):
        fragment = fragment.getroot()
    if not isinstance(fragment, etree._Element) or not isinstance(fragment.tag, str):
        msg = f"Diagnostics configuration must be an XML element, got {type(fragment).__name__}"
        raise InvalidArgumentError(msg, argument="diagnostics_fragment", stage="build_config")
    return fragment
