"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from ragpipe.configs.blob_store import BlobStoreSettings
from ragpipe.configs.embedding import EmbeddingServiceSettings
from ragpipe.configs.pipeline import DocumentPipelineSettings
from ragpipe.configs.settings import Settings, get_settings
from ragpipe.configs.vector_index import VectorIndexSettings

__all__ = [
    "BlobStoreSettings",
    "DocumentPipelineSettings",
    "EmbeddingServiceSettings",
    "Settings",
    "VectorIndexSettings",
    "get_settings",
]
