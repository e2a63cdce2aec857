"""
Client configuration using Pydantic Settings.

Environment variables use the HAPROXY_RUNTIME_ prefix:
- HAPROXY_RUNTIME_SOCKET, HAPROXY_RUNTIME_CONNECT_TIMEOUT (runtime settings)
- HAPROXY_RUNTIME_MAINTENANCE_POLL_INTERVAL (maintenance settings)
- HAPROXY_RUNTIME_LOG_LEVEL (log settings)
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SOCKET = "unix:///var/run/haproxy/admin.sock"


def get_project_root() -> Path:
    """Get the directory holding config/config.yaml."""
    if env_home := os.getenv("HAPROXY_RUNTIME_HOME"):
        return Path(env_home)
    return Path.cwd()


class RuntimeSettings(BaseSettings):
    """Runtime socket settings."""

    model_config = SettingsConfigDict(
        env_prefix="HAPROXY_RUNTIME_",
        extra="ignore",
    )

    socket: str = Field(
        default=DEFAULT_SOCKET,
        description="Runtime API locator (unix://<path> or tcp://<host>:<port>)"
    )
    connect_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Dial timeout in seconds (unset means no timeout)"
    )
    read_limit: int = Field(
        default=64 * 1024 * 1024,
        ge=1,
        description="Maximum accepted response size in bytes"
    )

    @field_validator('socket')
    @classmethod
    def validate_socket(cls, v: str) -> str:
        """Validate the locator prefix."""
        if not v.startswith(("unix://", "tcp://")):
            raise ValueError(f"socket [{v}] must start with unix:// or tcp://")
        return v


class MaintenanceSettings(BaseSettings):
    """Drain-to-maintenance settings."""

    model_config = SettingsConfigDict(
        env_prefix="HAPROXY_RUNTIME_MAINTENANCE_",
        extra="ignore",
    )

    poll_interval: float = Field(
        default=0.01,
        gt=0,
        description="Delay between session counter polls in seconds"
    )
    timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Drain deadline used by the CLI (unset means wait forever)"
    )


class LogSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="HAPROXY_RUNTIME_LOG_",
        extra="ignore",
    )

    level: str = Field(
        default="WARNING",
        description="Log level"
    )
    format: str = Field(
        default="console",
        description="Log format (json, console)"
    )
    file: Optional[str] = Field(
        default=None,
        description="Log file path"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator('format')
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ("json", "console"):
            raise ValueError(f"Invalid log format: {v}. Must be 'json' or 'console'")
        return v


class Settings(BaseSettings):
    """
    Main client settings.

    Loads configuration from:
    1. Environment variables (HAPROXY_RUNTIME_* prefix)
    2. YAML config file (config/config.yaml)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="HAPROXY_RUNTIME_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)
    maintenance: MaintenanceSettings = Field(default_factory=MaintenanceSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    @classmethod
    def load_from_yaml(cls, config_file: Path) -> "Settings":
        """Load settings from YAML file with environment overrides."""
        data = {}

        if config_file.exists():
            with open(config_file, 'r') as f:
                data = yaml.safe_load(f) or {}

        settings_dict = {}

        if 'runtime' in data:
            settings_dict['runtime'] = RuntimeSettings(**data['runtime'])
        if 'maintenance' in data:
            settings_dict['maintenance'] = MaintenanceSettings(**data['maintenance'])
        if 'log' in data:
            settings_dict['log'] = LogSettings(**data['log'])

        return cls(**settings_dict)


@lru_cache()
def get_settings() -> Settings:
    """
    Get client settings (cached singleton).

    Loads config/config.yaml when present, then applies environment
    variable overrides.
    """
    config_file = get_project_root() / "config" / "config.yaml"

    if config_file.exists():
        return Settings.load_from_yaml(config_file)

    return Settings()
