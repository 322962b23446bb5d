"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml  -- static defaults checked into the repo
  2. .env file           -- local developer overrides
  3. Environment vars    -- deployment overrides

Only values that differ from the Settings defaults are layered over the
YAML file, so a key set in config.yaml keeps its value unless the
environment explicitly changes it.
"""

from pathlib import Path

import yaml

from docrag.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Optional pre-built Settings; a fresh instance is read otherwise.

    Returns:
        Fully resolved configuration dictionary with ``app``, ``chunking``,
        ``retrieval``, ``embedding``, ``extraction``, ``generation`` and
        ``vector_store`` sections.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    defaults = Settings.model_construct()
    env_overrides = _explicit_sections(settings, defaults)

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


_SECTIONS: dict[str, dict[str, str]] = {
    "app": {
        "host": "app_host",
        "port": "app_port",
        "env": "app_env",
        "log_level": "log_level",
    },
    "chunking": {
        "max_size": "chunk_max_size",
        "min_size": "chunk_min_size",
        "overlap": "chunk_overlap",
    },
    "retrieval": {
        "limit": "search_limit",
        "threshold": "search_threshold",
        "context_max_chars": "context_max_chars",
    },
    "embedding": {
        "batch_delay": "embedding_batch_delay",
        "cache_size": "embedding_cache_size",
        "cache_ttl": "embedding_cache_ttl",
    },
    "extraction": {
        "open_timeout": "extraction_open_timeout",
        "max_file_size": "extraction_max_file_size",
        "remote_url": "remote_extraction_url",
        "remote_timeout": "remote_extraction_timeout",
    },
    "generation": {
        "temperature": "generation_temperature",
        "max_tokens": "generation_max_tokens",
    },
    "vector_store": {
        "provider": "vector_store_provider",
        "url": "vector_store_url",
        "collection_name": "vector_store_collection",
        "dimension": "vector_store_dimension",
        "persist_dir": "chromadb_persist_dir",
    },
}


def _explicit_sections(settings: Settings, defaults: Settings) -> dict:
    """Group Settings fields into config sections, keeping only non-default values."""
    sections: dict[str, dict] = {}
    for section, fields in _SECTIONS.items():
        for key, attr in fields.items():
            value = getattr(settings, attr)
            if value != getattr(defaults, attr):
                sections.setdefault(section, {})[key] = value
    return sections


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def resolve_settings(config: dict, settings: Settings | None = None) -> Settings:
    """Return *settings* updated with every known key of a loaded config dict."""
    settings = settings or Settings()
    updates: dict = {}
    for section, fields in _SECTIONS.items():
        values = config.get(section) or {}
        for key, attr in fields.items():
            if key in values and values[key] is not None:
                updates[attr] = values[key]
    return Settings.model_validate({**settings.model_dump(), **updates})
