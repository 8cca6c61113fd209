"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (SPECPROXY__RUNTIME_VERSION=2.1.0)
  2. specproxy.yaml         (searched in cwd, then the user config dir)
  3. Hardcoded defaults

The config file is optional — all fields have sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import platformdirs
from packaging.version import InvalidVersion, Version
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("specproxy")
_DEFAULT_INSTALL_ROOT = str(Path(_DEFAULT_DATA_DIR) / "packages")

# Host package-manager runtime assumed when nothing is configured.
DEFAULT_RUNTIME_VERSION = "3.5.0"


def _find_config_file() -> str | None:
    """Return the path of the first specproxy.yaml found, or None."""
    candidates = [
        Path("specproxy.yaml"),
        Path(platformdirs.user_config_dir("specproxy")) / "specproxy.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class InstallSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    root: str = _DEFAULT_INSTALL_ROOT


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: SPECPROXY__INSTALL__ROOT=/opt/pkgs
        env_prefix="SPECPROXY__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
        extra="forbid",
    )

    runtime_version: str = DEFAULT_RUNTIME_VERSION
    install: InstallSettings = InstallSettings()
    logging: LoggingSettings = LoggingSettings()

    @field_validator("runtime_version")
    @classmethod
    def validate_runtime_version(cls, v: str) -> str:
        v = v.strip()
        try:
            Version(v)
        except InvalidVersion as exc:
            raise ValueError(f"Invalid runtime version: {v!r}") from exc
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return Settings()
