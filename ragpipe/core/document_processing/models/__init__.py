"""
Models for document processing pipeline.

Exports: Chunk, Page, IngestionResult, PreviewEntry
"""

from .chunk import Chunk
from .page import Page
from .pipeline_result import IngestionResult, PreviewEntry

__all__ = [
    "Chunk",
    "Page",
    "IngestionResult",
    "PreviewEntry",
]
