"""Configuration: pydantic-settings Settings and the YAML loader."""

from docrag.config.loader import load_config, resolve_settings
from docrag.config.settings import Settings

__all__ = ["Settings", "load_config", "resolve_settings"]
