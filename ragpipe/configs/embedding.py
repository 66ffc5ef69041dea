"""
Embedding service configuration settings.

Manages credentials and endpoint for the remote embedding service.

Dependencies: pydantic, pydantic_settings
System role: Embedding client configuration
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingServiceSettings(BaseSettings):
    """Remote embedding service (Gemini REST API) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EMBEDDING_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("EMBEDDING_API_KEY", "GEMINI_API_KEY"),
        description="API key sent in the x-goog-api-key header",
    )
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Embedding API base URL",
    )
    model: str = Field(
        default="gemini-embedding-001",
        description="Embedding model identifier",
    )
    timeout_seconds: float = Field(default=60.0, description="Per-request timeout")
