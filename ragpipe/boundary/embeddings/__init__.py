"""
Embedding service clients.

Exports: GeminiEmbeddingClient, normalize_embeddings
"""

from ragpipe.boundary.embeddings.gemini_client import GeminiEmbeddingClient
from ragpipe.boundary.embeddings.response_parsing import normalize_embeddings

__all__ = ["GeminiEmbeddingClient", "normalize_embeddings"]
