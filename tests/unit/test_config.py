"""Tests for diagnostics configuration.

Covers:
- Default values
- Loading from environment variables
- Fail-fast validation
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from vm_diagnostics.core.config import ConfigValidationError, DiagnosticsConfig

_ENV_KEYS = (
    "DIAGNOSTICS_STORAGE_ACCOUNT_NAME",
    "DIAGNOSTICS_STORAGE_ACCOUNT_KEY",
    "DIAGNOSTICS_ENDPOINT_SUFFIX",
    "DIAGNOSTICS_UPLOAD_CONTAINER",
    "DIAGNOSTICS_CONFIGURATION_FILE",
)


@pytest.fixture(autouse=True)
def _clean_env():
    """Remove diagnostics variables inherited from the host environment."""
    saved = {k: os.environ.pop(k) for k in _ENV_KEYS if k in os.environ}
    yield
    os.environ.update(saved)


class TestDiagnosticsConfigDefaults:
    """Verify default configuration values."""

    def test_defaults(self) -> None:
        cfg = DiagnosticsConfig()
        assert cfg.storage_account_name == ""
        assert cfg.storage_account_key == ""
        assert cfg.endpoint_suffix == "core.windows.net"
        assert cfg.upload_container == "azpsnode122011"
        assert cfg.configuration_file == ""
        assert cfg.has_credentials is False

    def test_from_env_defaults(self) -> None:
        assert DiagnosticsConfig.from_env() == DiagnosticsConfig()


class TestDiagnosticsConfigFromEnv:
    """Verify loading from environment variables."""

    def test_loads_from_environment(self) -> None:
        env = {
            "DIAGNOSTICS_STORAGE_ACCOUNT_NAME": "acct",
            "DIAGNOSTICS_STORAGE_ACCOUNT_KEY": "secret==",
            "DIAGNOSTICS_ENDPOINT_SUFFIX": "core.usgovcloudapi.net",
            "DIAGNOSTICS_UPLOAD_CONTAINER": "packages",
            "DIAGNOSTICS_CONFIGURATION_FILE": "/etc/wadcfg.xml",
        }
        with patch.dict(os.environ, env, clear=False):
            cfg = DiagnosticsConfig.from_env()
        assert cfg.storage_account_name == "acct"
        assert cfg.storage_account_key == "secret=="
        assert cfg.endpoint_suffix == "core.usgovcloudapi.net"
        assert cfg.upload_container == "packages"
        assert cfg.configuration_file == "/etc/wadcfg.xml"
        assert cfg.has_credentials is True

    def test_repr_hides_key(self) -> None:
        cfg = DiagnosticsConfig(storage_account_name="acct", storage_account_key="secret==")
        assert "secret==" not in repr(cfg)


class TestDiagnosticsConfigValidation:
    """Fail-fast validation."""

    def test_name_without_key(self) -> None:
        with patch.dict(os.environ, {"DIAGNOSTICS_STORAGE_ACCOUNT_NAME": "acct"}):
            with pytest.raises(ConfigValidationError) as exc_info:
                DiagnosticsConfig.from_env()
        assert exc_info.value.key == "DIAGNOSTICS_STORAGE_ACCOUNT_KEY"

    def test_key_without_name(self) -> None:
        with patch.dict(os.environ, {"DIAGNOSTICS_STORAGE_ACCOUNT_KEY": "k"}):
            with pytest.raises(ConfigValidationError) as exc_info:
                DiagnosticsConfig.from_env()
        assert exc_info.value.key == "DIAGNOSTICS_STORAGE_ACCOUNT_NAME"

    def test_empty_suffix(self) -> None:
        with patch.dict(os.environ, {"DIAGNOSTICS_ENDPOINT_SUFFIX": ""}):
            with pytest.raises(ConfigValidationError, match="must not be empty"):
                DiagnosticsConfig.from_env()

    @pytest.mark.parametrize("name", ["", "ab", "Upper", "has--double", "-lead", "trail-", "a_b"])
    def test_invalid_container(self, name: str) -> None:
        with patch.dict(os.environ, {"DIAGNOSTICS_UPLOAD_CONTAINER": name}):
            with pytest.raises(ConfigValidationError) as exc_info:
                DiagnosticsConfig.from_env()
        assert exc_info.value.key == "DIAGNOSTICS_UPLOAD_CONTAINER"

    @pytest.mark.parametrize("name", ["abc", "my-packages", "a" * 63])
    def test_valid_container(self, name: str) -> None:
        with patch.dict(os.environ, {"DIAGNOSTICS_UPLOAD_CONTAINER": name}):
            assert DiagnosticsConfig.from_env().upload_container == name
