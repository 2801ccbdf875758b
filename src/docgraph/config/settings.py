"""Application settings."""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """docgraph settings, read from ``DOCGRAPH_*`` variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="DOCGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    # Graph store
    graph_store: Literal["memory", "falkordb"] = "memory"
    falkordb_path: str = "~/.docgraph/graph.db"
    falkordb_graph_name: str = "knowledge"

    # Embeddings
    embedding_provider: Literal["openai", "local"] = "local"
    openai_api_key: str | None = None
    openai_embedding_model: str = "text-embedding-ada-002"
    local_embedding_model: str = "all-MiniLM-L6-v2"

    # Structured extraction service
    structured_extraction_enabled: bool = True
    structured_extraction_url: str = "http://localhost:8000/general/v0/general"
    structured_extraction_api_key: str | None = None
    structured_extraction_timeout: float = Field(default=5.0, gt=0)

    # Chunking and node content
    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)
    max_chunks: int = Field(default=20, ge=1)
    content_preview_length: int = Field(default=1000, gt=0)

    # Extraction
    ocr_languages: list[str] = Field(default_factory=lambda: ["eng"])
    max_pages: int | None = None
    max_upload_size_mb: int = Field(default=50, gt=0)

    # Notifications
    progress_webhook_url: str | None = None

    @model_validator(mode="after")
    def _validate_settings(self) -> "Settings":
        if self.embedding_provider == "openai" and not self.openai_api_key:
            raise ValueError("openai_api_key is required when embedding_provider=openai")
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        self.log_level = self.log_level.upper()
        return self

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024
