"""Configuration models for the agent service."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrievalConfig(BaseModel):
    """Configures similarity search used by retrieval augmentation."""

    top_k: int = Field(default=4, ge=1)


class AgentConfig(BaseModel):
    """Configures agent execution."""

    max_iterations: int = Field(default=6, ge=1)


class Settings(BaseSettings):
    """Process settings loaded from environment variables or `.env`.

    Secrets are `SecretStr` so they never show up in repr or logs. Every field
    has a default, so the service starts offline (no chat model, no MCP tools)
    when nothing is configured.
    """

    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"
    openai_embedding_model: str = "text-embedding-3-small"

    docs_dir: Path = Path("docs")
    default_document: str = "online_shopping_faq.pdf"
    ingest_on_startup: bool = True

    vector_store: Literal["memory", "faiss"] = "memory"

    mcp_server_url: str | None = None
    mcp_server_api_key: SecretStr | None = None
    mcp_timeout_seconds: float = Field(default=30.0, gt=0.0)

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("default_document")
    @classmethod
    def _default_document_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("default_document must not be blank")
        return v


settings = Settings()
