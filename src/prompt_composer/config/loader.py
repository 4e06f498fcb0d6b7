"""Configuration loader with YAML and environment variable support.

This module reads ~/.config/prompt-composer/config.yaml when it exists and
allows environment variable overrides using the PROMPT_COMPOSER_* prefix.
Unlike a missing API key, a missing config file is not an error: every
setting has a default.

Environment variables:
- PROMPT_COMPOSER_PROJECT_DIRS: os.pathsep-separated project directories
- PROMPT_COMPOSER_GLOBAL_DIR: Override templates.global_dir
- PROMPT_COMPOSER_MAX_DEPTH: Override templates.max_depth
- PROMPT_COMPOSER_RESPONSE_FILENAME: Override saved_response.default_filename
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from prompt_composer.models.config import Config
from prompt_composer.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "prompt-composer" / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to config file. If None, uses ~/.config/prompt-composer/config.yaml

    Returns:
        Validated Config object

    Raises:
        ValueError: If the config file or an override is invalid
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if config_path.exists():
        with config_path.open() as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
        logger.info("config_loaded", path=str(config_path))
    else:
        data = {}
        logger.debug("config_defaults_used", path=str(config_path))

    if not isinstance(data, dict):
        raise ValueError(f"Configuration in {config_path} must be a mapping")

    data = _apply_env_overrides(data)

    try:
        return Config(**data)
    except Exception as e:
        logger.error("config_validation_error", path=str(config_path), error=str(e))
        raise ValueError(f"Configuration validation failed: {e}") from e


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration data.

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    if "templates" not in data:
        data["templates"] = {}
    if "saved_response" not in data:
        data["saved_response"] = {}

    if env_dirs := os.getenv("PROMPT_COMPOSER_PROJECT_DIRS"):
        data["templates"]["project_dirs"] = [d for d in env_dirs.split(os.pathsep) if d]

    if env_global := os.getenv("PROMPT_COMPOSER_GLOBAL_DIR"):
        data["templates"]["global_dir"] = env_global

    if env_depth := os.getenv("PROMPT_COMPOSER_MAX_DEPTH"):
        try:
            data["templates"]["max_depth"] = int(env_depth)
        except ValueError:
            logger.warning("config_env_ignored", variable="PROMPT_COMPOSER_MAX_DEPTH", value=env_depth)

    if env_filename := os.getenv("PROMPT_COMPOSER_RESPONSE_FILENAME"):
        data["saved_response"]["default_filename"] = env_filename

    return data
