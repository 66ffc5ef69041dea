"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from ragpipe.configs.base import BaseSettings
from ragpipe.configs.blob_store import BlobStoreSettings
from ragpipe.configs.embedding import EmbeddingServiceSettings
from ragpipe.configs.vector_index import VectorIndexSettings
from ragpipe.configs.pipeline import DocumentPipelineSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    embedding: EmbeddingServiceSettings = Field(default_factory=EmbeddingServiceSettings)
    vector_index: VectorIndexSettings = Field(default_factory=VectorIndexSettings)
    blob_store: BlobStoreSettings = Field(default_factory=BlobStoreSettings)
    pipeline: DocumentPipelineSettings = Field(default_factory=DocumentPipelineSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Environment variables are loaded once, at process start.

    Returns:
        Settings: Application settings instance

    Usage:
        from ragpipe.configs import get_settings
        settings = get_settings()
    """
    return Settings()
