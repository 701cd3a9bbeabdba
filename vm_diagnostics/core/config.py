"""Diagnostics configuration loaded from environment variables.

Values have defaults matching the public Azure cloud. ``from_env()``
raises ``ConfigValidationError`` if a value is invalid so that bad
configuration is caught before any document is built or uploaded.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from vm_diagnostics.core.constants import (
    DEFAULT_ENDPOINT_SUFFIX,
    DEFAULT_UPLOAD_CONTAINER,
    STORAGE_RESOURCE_NAME_RE,
)
from vm_diagnostics.core.exceptions import InvalidArgumentError


class ConfigValidationError(InvalidArgumentError):
    """Raised when configuration values are invalid.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}", argument=key)


@dataclass(frozen=True, slots=True)
class DiagnosticsConfig:
    """Immutable diagnostics configuration.

    Attributes:
        storage_account_name: Storage account receiving diagnostics data.
        storage_account_key: Access key for that account.
        endpoint_suffix: DNS suffix for default storage endpoints.
        upload_container: Blob container for uploaded files.
        configuration_file: Default path of a ``WadCfg`` fragment file.
    """

    storage_account_name: str = ""
    storage_account_key: str = ""
    endpoint_suffix: str = DEFAULT_ENDPOINT_SUFFIX
    upload_container: str = DEFAULT_UPLOAD_CONTAINER
    configuration_file: str = ""

    @property
    def has_credentials(self) -> bool:
        """``True`` when both account name and key are configured."""
        return bool(self.storage_account_name and self.storage_account_key)

    def __repr__(self) -> str:
        return (
            f"DiagnosticsConfig(storage_account_name={self.storage_account_name!r}, "
            f"storage_account_key={'***' if self.storage_account_key else ''!r}, "
            f"endpoint_suffix={self.endpoint_suffix!r}, "
            f"upload_container={self.upload_container!r}, "
            f"configuration_file={self.configuration_file!r})"
        )

    @classmethod
    def from_env(cls) -> DiagnosticsConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is empty where required, the
                credentials are only half configured, or the container name
                is not a valid blob container name.
        """
        config = cls(
            storage_account_name=os.getenv("DIAGNOSTICS_STORAGE_ACCOUNT_NAME", ""),
            storage_account_key=os.getenv("DIAGNOSTICS_STORAGE_ACCOUNT_KEY", ""),
            endpoint_suffix=os.getenv("DIAGNOSTICS_ENDPOINT_SUFFIX", DEFAULT_ENDPOINT_SUFFIX),
            upload_container=os.getenv("DIAGNOSTICS_UPLOAD_CONTAINER", DEFAULT_UPLOAD_CONTAINER),
            configuration_file=os.getenv("DIAGNOSTICS_CONFIGURATION_FILE", ""),
        )
        _validate(config)
        return config


def _validate(config: DiagnosticsConfig) -> None:
    """Validate configuration values.  Raises ``ConfigValidationError``."""
    if bool(config.storage_account_name) != bool(config.storage_account_key):
        missing = (
            "DIAGNOSTICS_STORAGE_ACCOUNT_KEY"
            if config.storage_account_name
            else "DIAGNOSTICS_STORAGE_ACCOUNT_NAME"
        )
        raise ConfigValidationError(
            missing,
            "",
            "storage account name and key must be set together",
        )

    if not config.endpoint_suffix:
        raise ConfigValidationError(
            "DIAGNOSTICS_ENDPOINT_SUFFIX",
            config.endpoint_suffix,
            "must not be empty",
        )

    if not STORAGE_RESOURCE_NAME_RE.match(config.upload_container):
        raise ConfigValidationError(
            "DIAGNOSTICS_UPLOAD_CONTAINER",
            config.upload_container,
            "must be 3-63 lowercase letters, digits or single hyphens",
        )
