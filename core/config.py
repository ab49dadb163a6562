from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List, Optional


class Settings(BaseSettings):
    app_name: str = "PDF RAG Chat API"
    environment: str = Field(default="development")

    # Required by the embedding and generation capabilities, checked on first use
    OPENAI_API_KEY: Optional[str] = None

    # CORS
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Logging
    LOG_LEVEL: str = "INFO"

    # File Upload Settings
    MAX_FILE_SIZE_MB: int = 10
    ALLOWED_EXTENSIONS: List[str] = [".pdf"]
    UPLOAD_DIR: str = "server/uploads"
    VECTOR_STORE_DIR: str = "server/vector_store"

    # RAG Settings
    CHUNK_SIZE: int = 500
    CHUNK_OVERLAP: int = 50
    TOP_K_RESULTS: int = 4

    # OpenAI Settings
    EMBEDDING_MODEL: str = "text-embedding-3-small"
    CHAT_MODEL: str = "gpt-4o-mini"
    TEMPERATURE: float = 0.3
    MAX_TOKENS: int = 500

    # Answer cache
    CACHE_TTL_SECONDS: float = 600
    CACHE_CHECK_PERIOD_SECONDS: float = 120
    CACHE_MAX_ENTRIES: int = 0  # 0 means unbounded

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = 5001

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_FILE_SIZE_MB * 1024 * 1024


settings = Settings()
