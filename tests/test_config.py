"""
Tests for settings loading.
"""

import pytest
from pydantic import ValidationError

from haproxy_runtime.core.config import (
    DEFAULT_SOCKET,
    LogSettings,
    MaintenanceSettings,
    RuntimeSettings,
    Settings,
    get_settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host environment variables out of the tests."""
    for name in (
        "HAPROXY_RUNTIME_SOCKET",
        "HAPROXY_RUNTIME_CONNECT_TIMEOUT",
        "HAPROXY_RUNTIME_MAINTENANCE_POLL_INTERVAL",
        "HAPROXY_RUNTIME_MAINTENANCE_TIMEOUT",
        "HAPROXY_RUNTIME_LOG_LEVEL",
        "HAPROXY_RUNTIME_HOME",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for the settings groups."""

    def test_defaults(self):
        """Defaults need no environment or file."""
        settings = Settings()
        assert settings.runtime.socket == DEFAULT_SOCKET
        assert settings.runtime.connect_timeout is None
        assert settings.maintenance.poll_interval == 0.01
        assert settings.maintenance.timeout is None
        assert settings.log.level == "WARNING"

    def test_environment_override(self, monkeypatch):
        """HAPROXY_RUNTIME_* variables override defaults."""
        monkeypatch.setenv("HAPROXY_RUNTIME_SOCKET", "tcp://127.0.0.1:9999")
        monkeypatch.setenv("HAPROXY_RUNTIME_MAINTENANCE_TIMEOUT", "30")
        monkeypatch.setenv("HAPROXY_RUNTIME_LOG_LEVEL", "debug")

        settings = Settings()

        assert settings.runtime.socket == "tcp://127.0.0.1:9999"
        assert settings.maintenance.timeout == 30
        assert settings.log.level == "DEBUG"

    def test_invalid_socket_prefix(self):
        """The locator prefix is validated."""
        with pytest.raises(ValidationError):
            RuntimeSettings(socket="localhost:9999")

    def test_invalid_log_level(self):
        """Unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            LogSettings(level="LOUD")

    def test_invalid_poll_interval(self):
        """The poll interval must be positive."""
        with pytest.raises(ValidationError):
            MaintenanceSettings(poll_interval=0)

    def test_load_from_yaml(self, tmp_path):
        """YAML sections populate the matching groups."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "runtime:\n"
            "  socket: unix:///run/haproxy/admin.sock\n"
            "  connect_timeout: 1.5\n"
            "maintenance:\n"
            "  poll_interval: 0.25\n"
            "log:\n"
            "  format: json\n"
        )

        settings = Settings.load_from_yaml(config_file)

        assert settings.runtime.socket == "unix:///run/haproxy/admin.sock"
        assert settings.runtime.connect_timeout == 1.5
        assert settings.maintenance.poll_interval == 0.25
        assert settings.log.format == "json"

    def test_load_from_missing_yaml(self, tmp_path):
        """A missing file falls back to defaults."""
        settings = Settings.load_from_yaml(tmp_path / "missing.yaml")
        assert settings.runtime.socket == DEFAULT_SOCKET

    def test_get_settings_reads_project_config(self, tmp_path, monkeypatch):
        """get_settings loads config/config.yaml under HAPROXY_RUNTIME_HOME."""
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "config.yaml").write_text(
            "runtime:\n  socket: tcp://10.0.0.1:9999\n"
        )
        monkeypatch.setenv("HAPROXY_RUNTIME_HOME", str(tmp_path))

        assert get_settings().runtime.socket == "tcp://10.0.0.1:9999"
