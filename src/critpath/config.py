"""Configuration file loading for critpath.

A single optional YAML file (critpath_config.yaml) holds scheduler settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from . import context
from .exceptions import ValidationError
from .scheduler.config import SchedulerConfig

DEFAULT_CONFIG_FILENAME = "critpath_config.yaml"


class CritpathConfig(BaseModel):
    """Top-level configuration."""

    scheduler: SchedulerConfig = SchedulerConfig()


def load_config(config_path: Path | str) -> CritpathConfig:
    """Load configuration from a YAML file.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValidationError: If the config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open(encoding="utf-8") as f:
        data: Any = yaml.safe_load(f)

    if not data:
        return CritpathConfig()
    if not isinstance(data, dict):
        raise ValidationError(f"Config file {config_path} must contain a mapping")

    try:
        return CritpathConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid configuration in {config_path}: {e}") from e


def discover_config(
    project_file_path: Path | str | None = None,
    config_path: Path | None = None,
) -> CritpathConfig:
    """Find and load configuration, falling back to defaults.

    Search order:
    1. Explicit config_path argument
    2. Global context (set via CLI --config)
    3. Project file directory / critpath_config.yaml
    4. Current directory / critpath_config.yaml
    """
    if config_path is not None:
        return load_config(config_path)

    ctx_config = context.get_config_path()
    if ctx_config is not None:
        return load_config(ctx_config)

    if project_file_path is not None:
        dir_config = Path(project_file_path).parent / DEFAULT_CONFIG_FILENAME
        if dir_config.exists():
            return load_config(dir_config)

    cwd_config = Path(DEFAULT_CONFIG_FILENAME)
    if cwd_config.exists():
        return load_config(cwd_config)

    return CritpathConfig()
