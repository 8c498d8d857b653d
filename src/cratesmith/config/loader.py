"""Configuration loading."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from cratesmith.config.schema import CratesmithConfig
from cratesmith.errors import ConfigurationError

CONFIG_FILENAME = "cratesmith.yaml"
CONFIG_ENV_VAR = "CRATESMITH_CONFIG"


def find_config(root: Path) -> Path | None:
    """Locate the configuration file for a repository.

    The CRATESMITH_CONFIG environment variable takes precedence over
    ``<root>/cratesmith.yaml``.

    Args:
        root: Repository root.

    Returns:
        Path to the config file, or None if there is none.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        if not path.is_absolute():
            path = root / path
        if not path.is_file():
            raise ConfigurationError("Config file not found", path=path)
        return path

    path = root / CONFIG_FILENAME
    return path if path.is_file() else None


def load_config(root: Path) -> CratesmithConfig:
    """Load and validate the repository configuration.

    Args:
        root: Repository root.

    Returns:
        Validated configuration (defaults if no file exists).

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated.
    """
    path = find_config(root)
    if path is None:
        return CratesmithConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read config: {e}", path=path) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML: {e}", path=path) from e

    if data is None:
        return CratesmithConfig()
    if not isinstance(data, dict):
        raise ConfigurationError("Config must be a mapping", path=path)

    try:
        return CratesmithConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", path=path) from e
