"""
Task modules for document processing pipeline.

Exports: S3DownloadTask, PdfPageSource, TextPageSource, ChunkingTask,
EmbeddingTask, VectorStoreTask
"""

from .chunking_task import ChunkingTask, assemble_chunks
from .embedding_task import EmbeddingClient, EmbeddingTask
from .parsing_task import PageSource, PdfPageSource, TextPageSource
from .s3_download_task import S3DownloadTask
from .splitting_task import DEFAULT_SEPARATORS, recursive_split
from .vector_store_task import VectorIndex, VectorStoreTask

__all__ = [
    "ChunkingTask",
    "DEFAULT_SEPARATORS",
    "EmbeddingClient",
    "EmbeddingTask",
    "PageSource",
    "PdfPageSource",
    "S3DownloadTask",
    "TextPageSource",
    "VectorIndex",
    "VectorStoreTask",
    "assemble_chunks",
    "recursive_split",
]
