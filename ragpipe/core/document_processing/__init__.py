"""
Document processing pipeline for ingestion and retrieval.

Dependencies: tiktoken, langchain_community, httpx, pydantic
System role: Document ingestion pipeline entrypoint
"""

from .entrypoint import DocumentPipeline, IngestionOptions
from .models import Chunk, IngestionResult, Page, PreviewEntry
from .query import QueryPipeline, build_context
from .tokenizer import Tokenizer, open_tokenizer

__all__ = [
    "Chunk",
    "DocumentPipeline",
    "IngestionOptions",
    "IngestionResult",
    "Page",
    "PreviewEntry",
    "QueryPipeline",
    "Tokenizer",
    "build_context",
    "open_tokenizer",
]
