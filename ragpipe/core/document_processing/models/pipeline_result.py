"""
Pipeline result model for document processing.

Represents the outcome of ingesting a document through the pipeline.

Dependencies: pydantic
System role: Return type for DocumentPipeline.ingest()
"""

from pydantic import BaseModel, Field


class PreviewEntry(BaseModel):
    """Diagnostic echo of one inserted record."""

    id: str = Field(description="Vector record id")
    page: int = Field(description="Source page")
    token_count: int = Field(description="Chunk token count")
    text_preview: str = Field(description="Leading characters of the chunk text")


class IngestionResult(BaseModel):
    """Result of document ingestion."""

    bucket: str = Field(description="Source bucket")
    path: str = Field(description="Source object path")
    namespace: str = Field(default="", description="Index namespace written to")
    total_inserted: int = Field(default=0, description="Records upserted")
    pages_processed: int = Field(default=0, description="Pages that produced chunks")
    pages_skipped: int = Field(default=0, description="Pages with no extractable text")
    batches_upserted: int = Field(default=0, description="Upsert calls made")
    purged_records: int = Field(default=0, description="Stale records deleted before ingest")
    sample: list[PreviewEntry] = Field(default_factory=list, description="First inserted records")
    processing_time_ms: float = Field(default=0.0, description="Total processing time in milliseconds")
