"""
Vector index configuration settings.

Manages the Pinecone-compatible index endpoint, credentials and namespace.

Dependencies: pydantic, pydantic_settings
System role: Vector index configuration for upsert and retrieval
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VectorIndexSettings(BaseSettings):
    """Vector index (Pinecone data plane) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="VECTOR_INDEX_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    api_url: str = Field(
        default="",
        validation_alias=AliasChoices("VECTOR_INDEX_API_URL", "PINECONE_API_URL"),
        description="Index host URL, e.g. https://my-index-abc123.svc.pinecone.io",
    )
    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("VECTOR_INDEX_API_KEY", "PINECONE_API_KEY"),
        description="API key sent in the Api-Key header",
    )
    namespace: str = Field(
        default="",
        validation_alias=AliasChoices("VECTOR_INDEX_NAMESPACE", "PINECONE_NAMESPACE"),
        description="Default namespace (empty means the index default namespace)",
    )
    timeout_seconds: float = Field(default=30.0, description="Per-request timeout")
    top_k: int = Field(default=3, ge=1, description="Default number of matches per query")
