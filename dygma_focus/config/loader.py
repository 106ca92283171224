"""
Configuration loader for loading and validating the JSON config file.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from dygma_focus.config.models import AppConfig
from dygma_focus.utils.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


def format_validation_error(e: ValidationError) -> str:
    """Render pydantic errors as one indented line per field."""
    errors = []
    for error in e.errors():
        field = " -> ".join(str(x) for x in error["loc"])
        errors.append(f"  - {field}: {error['msg']}")
    return "\n".join(errors)


def _create_default_config(config: AppConfig, config_path: Path) -> None:
    """
    Create a default config file.

    Args:
        config: Default AppConfig to save.
        config_path: Path where to create the config file.
    """
    try:
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config.model_dump(), f, indent=2)

        logger.info(f"Created default config file: {config_path}")

    except IOError as e:
        logger.warning(f"Failed to create default config file: {e}")


def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from JSON file.

    Args:
        path: Path to the config file. If None, built-in defaults are used.

    Returns:
        Validated AppConfig instance.

    Raises:
        ConfigurationError: If config file is unreadable or invalid.
    """
    if path is None:
        return AppConfig()

    config_path = Path(path)

    if not config_path.exists():
        logger.info(
            f"Config file not found: {config_path}. Creating with default configuration."
        )
        config = AppConfig()
        _create_default_config(config, config_path)
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_dict = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Invalid JSON in {config_path}: {e}"
        ) from e
    except IOError as e:
        raise ConfigurationError(
            f"Failed to read {config_path}: {e}"
        ) from e

    try:
        config = AppConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            "Configuration validation failed:\n" + format_validation_error(e)
        ) from e

    logger.info(f"Configuration loaded from {config_path}")
    return config


def save_config(config: AppConfig, path: str) -> None:
    """
    Save configuration to JSON file.

    Args:
        config: AppConfig instance to save.
        path: Destination path.

    Raises:
        ConfigurationError: If config file cannot be written.
    """
    config_path = Path(path)

    try:
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config.model_dump(), f, indent=2)

        logger.info(f"Configuration saved to {config_path}")

    except IOError as e:
        raise ConfigurationError(f"Failed to write {config_path}: {e}") from e
