# src/repofetch/config.py: Pydantic models for configuration.
# This module defines the schema for the optional 'config.yaml' file using
# Pydantic models. It is responsible for loading and validating the file and
# for falling back to defaults when the user has not created one. Path-valued
# settings have environment variables and '~' expanded before validation.

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .util.errors import ConfigError
from .util.paths import expand_path, get_default_config_path

# --- Pydantic Models for Configuration Schema ---

class GitSettings(BaseModel):
    executable: str = "git"
    # No timeout unless configured; network stalls are bounded by git itself.
    timeout_sec: Optional[int] = Field(default=None, gt=0)

class WorkerSettings(BaseModel):
    max_workers: int = Field(default=4, ge=1)

class SecretSettings(BaseModel):
    env_file: Path = Path(".env")
    fallback: str = "default"
    # When set, the OS keyring is consulted after the environment and dotenv file.
    keyring_service: Optional[str] = None

class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_format: bool = Field(True, alias="json")

    model_config = {"populate_by_name": True}

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level '{value}'")
        return level

class Config(BaseModel):
    scratch_dir: Optional[Path] = None
    git: GitSettings = Field(default_factory=GitSettings)
    workers: WorkerSettings = Field(default_factory=WorkerSettings)
    secrets: SecretSettings = Field(default_factory=SecretSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# --- Configuration Loading ---

_PATH_KEYS = {"scratch_dir", "env_file"}

def _expand_paths_in_obj(obj: Any) -> Any:
    """Recursively expand environment variables in path-valued settings."""
    if isinstance(obj, dict):
        expanded = {}
        for key, value in obj.items():
            if key in _PATH_KEYS and isinstance(value, str):
                expanded[key] = str(expand_path(value))
            else:
                expanded[key] = _expand_paths_in_obj(value)
        return expanded
    if isinstance(obj, list):
        return [_expand_paths_in_obj(item) for item in obj]
    return obj

def load_config(path: Optional[Path] = None) -> Config:
    """
    Loads, validates, and returns the configuration.

    An explicit `path` must exist. Without one, the default location is used
    and a missing file simply yields the defaults.
    """
    config_path = Path(path) if path is not None else get_default_config_path()
    if not config_path.is_file():
        if path is not None:
            raise ConfigError(f"Configuration file not found at '{config_path}'.")
        return Config()

    try:
        with open(config_path, "r") as f:
            raw_config = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read configuration file '{config_path}': {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML configuration: {e}")

    if raw_config is None:
        return Config()
    if not isinstance(raw_config, dict):
        raise ConfigError("Configuration validation failed: top level must be a mapping")

    try:
        return Config.model_validate(_expand_paths_in_obj(raw_config))
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}")
