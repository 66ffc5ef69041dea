"""
Document ingestion pipeline.

Drives one document through: page text -> split -> assemble -> batch ->
embed -> upsert, strictly in page order and batch order, accumulating
counters and a bounded preview sample.

Any unrecoverable error aborts the document. Batches already upserted stay
in the index; record ids are deterministic, so re-running after a fix
overwrites instead of duplicating.

Dependencies: All task modules, ragpipe.configs
System role: Pipeline orchestration (coordinates only)
"""

import argparse
import json
import logging
import os
import sys
import time
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from ragpipe.boundary.vdb.vector_schemas import document_id_prefix
from ragpipe.configs.pipeline import DocumentPipelineSettings
from ragpipe.core.exceptions import OversizedInputError, RagPipelineError
from ragpipe.observability.log_utils import log_exception_with_context, log_with_context

from .models import Chunk, IngestionResult, Page, PreviewEntry
from .tasks import (
    ChunkingTask,
    EmbeddingClient,
    EmbeddingTask,
    PageSource,
    PdfPageSource,
    S3DownloadTask,
    VectorIndex,
    VectorStoreTask,
)
from .tokenizer import open_tokenizer

if TYPE_CHECKING:
    from ragpipe.configs.settings import Settings

logger = logging.getLogger(__name__)


class IngestionOptions(BaseModel):
    """Per-call overrides of DocumentPipelineSettings (None keeps the setting)."""

    chunk_size_tokens: int | None = Field(default=None, gt=0)
    overlap_tokens: int | None = Field(default=None, ge=0)
    tokenizer_model: str | None = None
    batch_size: int | None = Field(default=None, gt=0)
    namespace: str | None = None
    preview_chunks: int | None = Field(default=None, ge=0)
    purge_before_ingest: bool | None = None


class _Run:
    """Mutable state of one ingestion call."""

    def __init__(
        self,
        bucket: str,
        path: str,
        settings: DocumentPipelineSettings,
        namespace: str,
        chunker: ChunkingTask,
        embedder: EmbeddingTask,
        store: VectorStoreTask,
    ) -> None:
        self.bucket = bucket
        self.path = path
        self.settings = settings
        self.chunker = chunker
        self.embedder = embedder
        self.store = store
        self.result = IngestionResult(bucket=bucket, path=path, namespace=namespace)

    def add_sample(self, record_id: str, page: int, chunk: Chunk) -> None:
        if len(self.result.sample) >= self.settings.preview_chunks:
            return
        self.result.sample.append(
            PreviewEntry(
                id=record_id,
                page=page,
                token_count=chunk.token_count,
                text_preview=chunk.text[: self.settings.sample_preview_chars],
            )
        )


class DocumentPipeline:
    """Orchestrate document ingestion: download -> parse -> chunk -> embed -> upsert."""

    def __init__(
        self,
        settings: DocumentPipelineSettings,
        embedding_client: EmbeddingClient,
        index_client: VectorIndex,
        downloader: S3DownloadTask | None = None,
        default_namespace: str | None = None,
    ) -> None:
        """
        Initialize pipeline with configuration and collaborators.

        Args:
            settings: Pipeline settings
            embedding_client: Embedding service client
            index_client: Vector index client
            downloader: Blob store download task (required by ingest())
            default_namespace: Namespace used when options do not name one
                (None uses the index client default_namespace)
        """
        self._settings = settings
        self._embedding_client = embedding_client
        self._index_client = index_client
        self._downloader = downloader
        self._default_namespace = default_namespace

    @classmethod
    def from_settings(cls, settings: "Settings") -> "DocumentPipeline":
        """
        Build a pipeline and its remote clients from application settings.

        Raises:
            ConfigurationError: When a credential or endpoint is missing
        """
        from ragpipe.boundary.embeddings import GeminiEmbeddingClient
        from ragpipe.boundary.vdb import PineconeIndexClient

        pipeline_settings = settings.pipeline
        return cls(
            settings=pipeline_settings,
            embedding_client=GeminiEmbeddingClient(
                settings.embedding,
                max_retries=pipeline_settings.max_retries,
                backoff_seconds=pipeline_settings.embed_backoff_seconds,
            ),
            index_client=PineconeIndexClient(
                settings.vector_index,
                max_retries=pipeline_settings.max_retries,
                backoff_seconds=pipeline_settings.upsert_backoff_seconds,
            ),
            downloader=S3DownloadTask(
                region=settings.blob_store.region,
                max_bytes=pipeline_settings.max_document_bytes,
            ),
            default_namespace=settings.vector_index.namespace,
        )

    def _namespace(self, options: IngestionOptions | None) -> str:
        # Option, then pipeline default, then the namespace the index client writes to
        if options is not None and options.namespace is not None:
            return options.namespace
        if self._default_namespace is not None:
            return self._default_namespace
        return self._index_client.default_namespace

    def _resolve(self, options: IngestionOptions | None) -> DocumentPipelineSettings:
        if options is None:
            return self._settings
        overrides = options.model_dump(exclude_none=True, exclude={"namespace"})
        # Re-validate so overlap >= chunk size is rejected for overrides too
        return DocumentPipelineSettings.model_validate(
            {**self._settings.model_dump(), **overrides}
        )

    def ingest(
        self,
        bucket: str,
        path: str,
        options: IngestionOptions | None = None,
    ) -> IngestionResult:
        """
        Download a PDF from the blob store and ingest it.

        Args:
            bucket: Source bucket
            path: Object path within the bucket
            options: Per-call overrides

        Returns:
            IngestionResult: Counters and preview sample

        Raises:
            ValueError: When bucket or path is missing, or no downloader is configured
            OversizedInputError: Document exceeds max_document_bytes
            BlobDownloadError / ParsingError: Source could not be read
            RetriesExhaustedError / NonTransientServiceError / ResponseAlignmentError:
                Embedding or upsert failed
        """
        if not bucket or not path:
            raise ValueError("bucket and path are required")
        if self._downloader is None:
            raise ValueError("ingest() requires a downloader; use ingest_file() for local files")

        local_path = self._downloader.download(bucket, path)
        try:
            return self.ingest_file(local_path, bucket, path, options)
        finally:
            self._downloader.cleanup(local_path)

    def ingest_file(
        self,
        file_path: str,
        bucket: str,
        path: str,
        options: IngestionOptions | None = None,
    ) -> IngestionResult:
        """
        Ingest a local PDF under the (bucket, path) identity.

        Raises:
            OversizedInputError: File exceeds max_document_bytes
        """
        size = os.path.getsize(file_path)
        if size > self._settings.max_document_bytes:
            raise OversizedInputError(f"{bucket}/{path}", size, self._settings.max_document_bytes)
        return self.ingest_source(PdfPageSource(file_path), bucket, path, options)

    def ingest_source(
        self,
        source: PageSource,
        bucket: str,
        path: str,
        options: IngestionOptions | None = None,
    ) -> IngestionResult:
        """
        Ingest text from a page source.

        Pages with no text contribute zero chunks. When the page count is
        unknown the merged text is processed in fixed-size windows numbered
        as pseudo-pages 1, 2, ...

        Args:
            source: Page text source
            bucket: Source bucket (record identity)
            path: Source object path (record identity)
            options: Per-call overrides

        Returns:
            IngestionResult: Counters and preview sample
        """
        settings = self._resolve(options)
        namespace = self._namespace(options)
        start_time = time.perf_counter()

        try:
            with open_tokenizer(settings.tokenizer_model) as tokenizer:
                run = _Run(
                    bucket=bucket,
                    path=path,
                    settings=settings,
                    namespace=namespace,
                    chunker=ChunkingTask(
                        tokenizer,
                        chunk_size_tokens=settings.chunk_size_tokens,
                        overlap_tokens=settings.overlap_tokens,
                    ),
                    embedder=EmbeddingTask(
                        self._embedding_client,
                        metadata_preview_chars=settings.metadata_preview_chars,
                    ),
                    store=VectorStoreTask(self._index_client, namespace=namespace),
                )

                if settings.purge_before_ingest:
                    run.result.purged_records = run.store.purge(document_id_prefix(bucket, path))

                for page in self._pages(source, settings):
                    self._ingest_page(run, page)

        except RagPipelineError as e:
            log_exception_with_context(
                logger,
                f"{__name__}:ingest_source - Ingestion failed",
                e,
                bucket=bucket,
                path=path,
            )
            raise

        run.result.processing_time_ms = (time.perf_counter() - start_time) * 1000
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:ingest_source - Ingested {run.result.total_inserted} chunks",
            bucket=bucket,
            path=path,
            namespace=run.result.namespace,
            pages_processed=run.result.pages_processed,
            pages_skipped=run.result.pages_skipped,
            batches=run.result.batches_upserted,
        )
        return run.result

    @staticmethod
    def _pages(source: PageSource, settings: DocumentPipelineSettings):
        page_count = source.page_count
        if page_count:
            for number in range(1, page_count + 1):
                yield Page(number=number, text=source.page_text(number))
            return

        full_text = source.full_text() or ""
        window = settings.fallback_window_chars
        for number, cursor in enumerate(range(0, len(full_text), window), start=1):
            yield Page(number=number, text=full_text[cursor:cursor + window])

    def _ingest_page(self, run: _Run, page: Page) -> None:
        if page.is_empty:
            run.result.pages_skipped += 1
            logger.debug(f"{__name__}:_ingest_page - Page {page.number} has no text")
            return

        chunks = run.chunker.chunk(page.text)
        if not chunks:
            run.result.pages_skipped += 1
            return

        batch_size = run.settings.batch_size
        for start in range(0, len(chunks), batch_size):
            batch = chunks[start:start + batch_size]
            records = run.embedder.embed(batch, run.bucket, run.path, page.number, start)
            run.store.upload(records)

            run.result.total_inserted += len(records)
            run.result.batches_upserted += 1
            for record, chunk in zip(records, batch):
                run.add_sample(record.id, page.number, chunk)

            logger.debug(
                f"{__name__}:_ingest_page - Page {page.number} batch {start // batch_size + 1}: "
                f"{len(records)} records"
            )

        run.result.pages_processed += 1


def main(argv: list[str] | None = None) -> int:
    """Command line: ingest a document or run a query."""
    from ragpipe.configs.settings import get_settings
    from ragpipe.observability.logger import configure_logging

    from .query import QueryPipeline

    parser = argparse.ArgumentParser(prog="ragpipe", description="PDF ingestion into a vector index")
    sub = parser.add_subparsers(dest="command", required=True)

    ingest_cmd = sub.add_parser("ingest", help="Ingest a PDF from the blob store")
    ingest_cmd.add_argument("bucket")
    ingest_cmd.add_argument("path")
    ingest_cmd.add_argument("--namespace", default=None)
    ingest_cmd.add_argument("--chunk-size", type=int, default=None)
    ingest_cmd.add_argument("--overlap", type=int, default=None)
    ingest_cmd.add_argument("--batch-size", type=int, default=None)
    ingest_cmd.add_argument("--purge", action="store_true", help="Delete the document's old records first")

    query_cmd = sub.add_parser("query", help="Query the index")
    query_cmd.add_argument("text")
    query_cmd.add_argument("--top-k", type=int, default=None)
    query_cmd.add_argument("--namespace", default=None)

    args = parser.parse_args(argv)
    load_dotenv()
    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        if args.command == "ingest":
            pipeline = DocumentPipeline.from_settings(settings)
            result = pipeline.ingest(
                args.bucket,
                args.path,
                IngestionOptions(
                    namespace=args.namespace,
                    chunk_size_tokens=args.chunk_size,
                    overlap_tokens=args.overlap,
                    batch_size=args.batch_size,
                    purge_before_ingest=True if args.purge else None,
                ),
            )
            print(result.model_dump_json(indent=2))
        else:
            query_pipeline = QueryPipeline.from_settings(settings)
            matches = query_pipeline.query(args.text, top_k=args.top_k, namespace=args.namespace)
            print(json.dumps([m.model_dump() for m in matches], indent=2))
    except (RagPipelineError, ValueError) as e:
        print(json.dumps({"ok": False, "error": str(e)}), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
