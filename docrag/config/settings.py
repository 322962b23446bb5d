"""Application settings loaded from environment variables via pydantic-settings.

Values are read from (highest priority first) environment variables and
the project-root ``.env`` file; field ``chunk_max_size`` maps to env var
``CHUNK_MAX_SIZE``.  Defaults apply when neither source sets a value.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """docrag application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === AI Provider (default configuration used at startup) ===
    # Empty ai_provider = start UNCONFIGURED and wait for POST /configure.
    ai_provider: str = ""
    ai_api_key: str = ""
    ai_model: str = ""
    ai_base_url: str = ""
    embedding_model: str = ""
    ollama_base_url: str = "http://localhost:11434"

    # === Vector Store ===
    vector_store_provider: str = "local"
    vector_store_url: str = ""
    vector_store_api_key: str = ""
    vector_store_collection: str = "docrag_documents"
    vector_store_dimension: int = 0
    chromadb_persist_dir: str = "./data/chromadb"

    # === Chunking ===
    chunk_max_size: int = 1000
    chunk_min_size: int = 200
    chunk_overlap: int = 150

    # === Retrieval ===
    search_limit: int = 5
    search_threshold: float = 0.1
    context_max_chars: int = 6000

    # === Embedding ===
    embedding_batch_delay: float = 0.1
    embedding_cache_size: int = 2048
    embedding_cache_ttl: int = 3600

    # === Extraction ===
    extraction_open_timeout: float = 30.0
    extraction_max_file_size: int = 100 * 1024 * 1024
    remote_extraction_url: str = ""
    remote_extraction_timeout: float = 60.0

    # === Generation ===
    generation_temperature: float = 0.7
    generation_max_tokens: int = 1000

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def has_default_provider(self) -> bool:
        """Return True when an AI provider is configured through the environment."""
        return bool(self.ai_provider)
