"""Unit tests for Settings, the YAML loader and settings resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from docrag.config.loader import load_config, resolve_settings
from docrag.config.settings import Settings


@pytest.fixture
def yaml_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        "chunking:\n"
        "  max_size: 800\n"
        "  overlap: 100\n"
        "retrieval:\n"
        "  threshold: 0.25\n"
        "vector_store:\n"
        "  provider: chromadb\n"
        "custom:\n"
        "  keep: true\n",
        encoding="utf-8",
    )
    return path


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("AI_PROVIDER", raising=False)
        settings = Settings(_env_file=None)

        assert settings.chunk_max_size == 1000
        assert settings.chunk_min_size == 200
        assert settings.chunk_overlap == 150
        assert settings.vector_store_provider == "local"
        assert settings.has_default_provider() is False

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHUNK_MAX_SIZE", "500")
        monkeypatch.setenv("AI_PROVIDER", "anthropic")

        settings = Settings(_env_file=None)

        assert settings.chunk_max_size == 500
        assert settings.has_default_provider() is True


class TestLoadConfig:
    def test_missing_file_gives_env_sections_only(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), Settings(_env_file=None, chunk_overlap=42))

        assert config == {"chunking": {"overlap": 42}}

    def test_yaml_values_kept_when_env_is_default(self, yaml_file: Path) -> None:
        config = load_config(str(yaml_file), Settings(_env_file=None))

        assert config["chunking"] == {"max_size": 800, "overlap": 100}
        assert config["custom"] == {"keep": True}

    def test_explicit_settings_override_yaml(self, yaml_file: Path) -> None:
        config = load_config(str(yaml_file), Settings(_env_file=None, chunk_max_size=1200, search_limit=9))

        assert config["chunking"]["max_size"] == 1200
        assert config["chunking"]["overlap"] == 100
        assert config["retrieval"] == {"threshold": 0.25, "limit": 9}

    def test_repo_config_parses(self, project_root: Path) -> None:
        config = load_config(str(project_root / "config" / "config.yaml"), Settings(_env_file=None))

        assert config["chunking"]["max_size"] == 1000
        assert config["vector_store"]["provider"] == "local"


class TestResolveSettings:
    def test_maps_sections_onto_fields(self, yaml_file: Path) -> None:
        base = Settings(_env_file=None)
        resolved = resolve_settings(load_config(str(yaml_file), base), base)

        assert resolved.chunk_max_size == 800
        assert resolved.chunk_overlap == 100
        assert resolved.search_threshold == 0.25
        assert resolved.vector_store_provider == "chromadb"
        assert resolved.chunk_min_size == 200

    def test_unknown_and_null_keys_ignored(self) -> None:
        base = Settings(_env_file=None)
        resolved = resolve_settings({"chunking": {"max_size": None, "bogus": 1}, "other": {}}, base)

        assert resolved.chunk_max_size == base.chunk_max_size
