"""Storage connection string model.

A connection string is a semicolon-delimited ``key=value`` list that
identifies a storage account, its access key and optionally explicit
blob/queue/table endpoints, e.g.::

    DefaultEndpointsProtocol=https;AccountName=acct;AccountKey=...;
    BlobEndpoint=https://acct.blob.core.windows.net/;...
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from vm_diagnostics.core.constants import (
    DEFAULT_ENDPOINT_SUFFIX,
    DEFAULT_ENDPOINTS_PROTOCOL,
    ENDPOINT_COUNT,
)
from vm_diagnostics.core.exceptions import ConfigParseError, InvalidArgumentError

_PROTOCOL_KEY = "DefaultEndpointsProtocol"
_ACCOUNT_NAME_KEY = "AccountName"
_ACCOUNT_KEY_KEY = "AccountKey"
_BLOB_KEY = "BlobEndpoint"
_QUEUE_KEY = "QueueEndpoint"
_TABLE_KEY = "TableEndpoint"


@dataclass(frozen=True, slots=True)
class StorageEndpoints:
    """Explicit service endpoints of a storage account.

    Attributes:
        blob: Blob service endpoint URI.
        queue: Queue service endpoint URI.
        table: Table service endpoint URI.
    """

    blob: str
    queue: str
    table: str

    def as_tuple(self) -> tuple[str, str, str]:
        return (self.blob, self.queue, self.table)

    @classmethod
    def from_sequence(cls, endpoints: Sequence[str]) -> StorageEndpoints:
        """Build from an ordered (blob, queue, table) sequence.

        Raises:
            InvalidArgumentError: If *endpoints* does not hold exactly
                three entries.
        """
        if isinstance(endpoints, str) or len(endpoints) != ENDPOINT_COUNT:
            count = 1 if isinstance(endpoints, str) else len(endpoints)
            msg = (
                f"Expected exactly {ENDPOINT_COUNT} endpoints "
                f"(blob, queue, table), got {count}"
            )
            raise InvalidArgumentError(msg, argument="endpoints")
        blob, queue, table = (str(e) for e in endpoints)
        return cls(blob=blob, queue=queue, table=table)

    @classmethod
    def default_for(
        cls,
        account_name: str,
        endpoint_suffix: str = DEFAULT_ENDPOINT_SUFFIX,
        protocol: str = DEFAULT_ENDPOINTS_PROTOCOL,
    ) -> StorageEndpoints:
        """Derive the default endpoints of *account_name*."""
        return cls(
            blob=f"{protocol}://{account_name}.blob.{endpoint_suffix}/",
            queue=f"{protocol}://{account_name}.queue.{endpoint_suffix}/",
            table=f"{protocol}://{account_name}.table.{endpoint_suffix}/",
        )


@dataclass(frozen=True, slots=True)
class StorageConnectionString:
    """A storage account connection string.

    Attributes:
        account_name: Storage account name.
        account_key: Storage account access key.
        endpoints: Explicit endpoints, or ``None`` for the default form.
        protocol: Value of ``DefaultEndpointsProtocol``.
    """

    account_name: str
    account_key: str
    endpoints: StorageEndpoints | None = None
    protocol: str = DEFAULT_ENDPOINTS_PROTOCOL

    def __repr__(self) -> str:
        return (
            f"StorageConnectionString(account_name={self.account_name!r}, "
            f"account_key='***', endpoints={self.endpoints!r}, protocol={self.protocol!r})"
        )

    def format(self) -> str:
        """Render the connection string in wire order."""
        parts = [
            f"{_PROTOCOL_KEY}={self.protocol}",
            f"{_ACCOUNT_NAME_KEY}={self.account_name}",
            f"{_ACCOUNT_KEY_KEY}={self.account_key}",
        ]
        if self.endpoints is not None:
            parts.extend(
                [
                    f"{_BLOB_KEY}={self.endpoints.blob}",
                    f"{_QUEUE_KEY}={self.endpoints.queue}",
                    f"{_TABLE_KEY}={self.endpoints.table}",
                ]
            )
        return ";".join(parts)

    def resolved_endpoints(
        self, endpoint_suffix: str = DEFAULT_ENDPOINT_SUFFIX
    ) -> StorageEndpoints:
        """Return explicit endpoints, or derive the defaults from the account name."""
        if self.endpoints is not None:
            return self.endpoints
        return StorageEndpoints.default_for(self.account_name, endpoint_suffix, self.protocol)

    @classmethod
    def parse(cls, text: str) -> StorageConnectionString:
        """Parse a ``key=value;key=value`` connection string.

        Empty segments are ignored and values may contain ``=`` (account
        keys are base64).  Explicit endpoints are kept only when all three
        are present.

        Raises:
            ConfigParseError: If a segment is not ``key=value``, a key is
                empty, or ``AccountName`` is missing.
        """
        settings = parse_settings(text)

        account_name = settings.get(_ACCOUNT_NAME_KEY, "")
        if not account_name:
            msg = "Connection string has no AccountName"
            raise ConfigParseError(msg, code="CONNECTION_STRING_INVALID")

        endpoints = None
        if all(settings.get(k) for k in (_BLOB_KEY, _QUEUE_KEY, _TABLE_KEY)):
            endpoints = StorageEndpoints(
                blob=settings[_BLOB_KEY],
                queue=settings[_QUEUE_KEY],
                table=settings[_TABLE_KEY],
            )

        return cls(
            account_name=account_name,
            account_key=settings.get(_ACCOUNT_KEY_KEY, ""),
            endpoints=endpoints,
            protocol=settings.get(_PROTOCOL_KEY, DEFAULT_ENDPOINTS_PROTOCOL),
        )


def parse_settings(text: str) -> dict[str, str]:
    """Split a connection string into its ``key -> value`` settings.

    Raises:
        ConfigParseError: If the text is empty, a segment has no ``=``,
            a key is empty, or a key appears twice.
    """
    if not text or not text.strip():
        msg = "Connection string is empty"
        raise ConfigParseError(msg, code="CONNECTION_STRING_INVALID")

    settings: dict[str, str] = {}
    for segment in text.strip().split(";"):
        segment = segment.strip()
        if not segment:
            continue
        key, sep, value = segment.partition("=")
        key = key.strip()
        if not sep or not key:
            msg = f"Malformed connection string segment: {segment.split('=', 1)[0]!r}"
            raise ConfigParseError(msg, code="CONNECTION_STRING_INVALID")
        if key in settings:
            msg = f"Duplicate connection string setting: {key}"
            raise ConfigParseError(msg, code="CONNECTION_STRING_INVALID")
        settings[key] = value.strip()
    return settings
