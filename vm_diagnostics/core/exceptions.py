"""Unified exception taxonomy.

Every domain exception inherits from ``DiagnosticsError`` and carries
structured context fields, so callers can tell user input errors apart
from stored-data corruption without inspecting the class hierarchy.

Error kinds
-----------
- ``invalid_argument``: missing or contradictory input, never retryable.
- ``parse_error``: malformed or incompatible configuration data.
- ``transient``: temporary failures (network, throttle), retryable.
- ``permanent``: unrecoverable storage failures, not retryable.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for logging and command output.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Machine-readable error kind carried by every ``DiagnosticsError``."""

    INVALID_ARGUMENT = "invalid_argument"
    PARSE_ERROR = "parse_error"
    TRANSIENT = "transient"
    PERMANENT = "permanent"


class DiagnosticsError(Exception):
    """Base exception for all diagnostics-extension errors.

    Attributes:
        message: Human-readable error description.
        stage: Operation where the error occurred
            (e.g. ``"build_config"``, ``"upload_blob"``).
        code: Machine-readable error code (e.g. ``"CONFIG_PARSE_FAILED"``).
        retryable: Whether the caller may retry the operation.
        correlation_id: Request correlation identifier.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""
    #: Error kind for subclasses; ``None`` derives it from ``retryable``.
    default_kind: ErrorKind | None = None

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        correlation_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.correlation_id = correlation_id
        super().__init__(message)

    @property
    def kind(self) -> ErrorKind:
        """Return the error kind for this exception."""
        if self.default_kind is not None:
            return self.default_kind
        return ErrorKind.TRANSIENT if self.retryable else ErrorKind.PERMANENT

    @property
    def category(self) -> str:
        """Return the error category as a plain string."""
        return str(self.kind)

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


# ---------------------------------------------------------------------------
# Kind base classes
# ---------------------------------------------------------------------------


class InvalidArgumentError(DiagnosticsError):
    """Missing, empty or contradictory input. Never retryable.

    Attributes:
        argument: Name of the offending argument, when known.
    """

    default_code = "INVALID_ARGUMENT"
    default_kind = ErrorKind.INVALID_ARGUMENT

    def __init__(self, message: str = "", *, argument: str = "", **kwargs: object) -> None:
        self.argument = argument
        kwargs["retryable"] = False
        super().__init__(message, **kwargs)  # type: ignore[arg-type]

    def to_error_dict(self) -> dict[str, object]:
        payload = super().to_error_dict()
        payload["argument"] = self.argument
        return payload


class ConfigParseError(DiagnosticsError):
    """Configuration text is malformed or lacks a required element."""

    default_stage = "parse_config"
    default_code = "CONFIG_PARSE_FAILED"
    default_kind = ErrorKind.PARSE_ERROR

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs["retryable"] = False
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class TransientError(DiagnosticsError):
    """Temporary failure that may succeed on retry."""

    default_kind = ErrorKind.TRANSIENT

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", True)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class PermanentError(DiagnosticsError):
    """Unrecoverable failure. Not retryable."""

    default_kind = ErrorKind.PERMANENT

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]
