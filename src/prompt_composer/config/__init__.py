"""Configuration loading."""

from prompt_composer.config.loader import load_config

__all__ = ["load_config"]
