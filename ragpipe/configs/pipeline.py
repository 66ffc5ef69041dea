"""
Configuration settings for document processing pipeline.

Provides environment-based configuration for chunking, batching, retry and
preview behaviour. Constructed once at process start and handed to
DocumentPipeline explicitly; the pipeline never reads the environment itself.

Dependencies: pydantic, pydantic_settings
System role: Ingestion pipeline configuration
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DocumentPipelineSettings(BaseSettings):
    """Settings for document ingestion pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="DOC_PIPELINE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking settings
    chunk_size_tokens: int = Field(
        default=800,
        gt=0,
        description="Target chunk size in tokens",
    )
    overlap_tokens: int = Field(
        default=100,
        ge=0,
        description="Token overlap carried from one chunk into the next",
    )
    tokenizer_model: str = Field(
        default="gpt-4o-mini",
        description="tiktoken model or encoding name used for sizing decisions",
    )

    # Batching and retry
    batch_size: int = Field(
        default=32,
        gt=0,
        description="Chunks per embedding request / upsert call",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        description="Attempt ceiling for transient upstream failures",
    )
    embed_backoff_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Backoff unit for embedding retries (wait = unit * attempt)",
    )
    upsert_backoff_seconds: float = Field(
        default=0.4,
        ge=0.0,
        description="Backoff unit for upsert retries (wait = unit * attempt)",
    )

    # Limits and previews
    max_document_bytes: int = Field(
        default=200 * 1024 * 1024,
        gt=0,
        description="Documents larger than this are rejected before processing",
    )
    fallback_window_chars: int = Field(
        default=1_000_000,
        gt=0,
        description="Window size for pseudo-pages when the page count is unknown",
    )
    preview_chunks: int = Field(
        default=5,
        ge=0,
        description="Number of inserted records echoed back in the result sample",
    )
    metadata_preview_chars: int = Field(default=300, ge=0)
    sample_preview_chars: int = Field(default=400, ge=0)

    # Stale-record handling
    purge_before_ingest: bool = Field(
        default=False,
        description="Delete every record under the document's id prefix before ingesting",
    )

    @model_validator(mode="after")
    def _check_overlap(self) -> "DocumentPipelineSettings":
        if self.overlap_tokens >= self.chunk_size_tokens:
            raise ValueError("overlap_tokens must be smaller than chunk_size_tokens")
        return self
