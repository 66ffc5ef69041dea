"""
Page text sources.

A page source reports its page count (None when unknown), the text of each
1-based page, and the merged text of the whole document. PDFs are read with
LangChain's PyPDFLoader.

Dependencies: langchain_community.document_loaders (pypdf)
System role: Text acquisition stage of the ingestion pipeline
"""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from langchain_community.document_loaders import PyPDFLoader
from langchain_core.documents import Document

from ragpipe.core.exceptions import ParsingError

logger = logging.getLogger(__name__)


class PageSource(Protocol):
    """Narrow interface the ingestion loop reads page text through."""

    @property
    def page_count(self) -> int | None: ...

    def page_text(self, page_number: int) -> str: ...

    def full_text(self) -> str: ...


class TextPageSource:
    """Page source over text the caller already holds."""

    def __init__(self, pages: Sequence[str] | None = None, text: str | None = None) -> None:
        """
        Args:
            pages: Per-page text; when None the page count is unknown
            text: Merged text, used when pages is None
        """
        self._pages = list(pages) if pages is not None else None
        self._text = text or ""

    @property
    def page_count(self) -> int | None:
        return len(self._pages) if self._pages is not None else None

    def page_text(self, page_number: int) -> str:
        if self._pages is None or not 1 <= page_number <= len(self._pages):
            raise ParsingError(f"Page {page_number} out of range")
        return self._pages[page_number - 1]

    def full_text(self) -> str:
        if self._pages is not None:
            return "\n".join(self._pages)
        return self._text


class PdfPageSource:
    """PDF page source backed by PyPDFLoader."""

    def __init__(self, file_path: str) -> None:
        """
        Args:
            file_path: Local path to a PDF file

        Raises:
            ParsingError: When the file is missing or not a PDF
        """
        path = Path(file_path)
        if not path.exists():
            raise ParsingError(f"File not found: {file_path}", file_path)
        if path.suffix.lower() != ".pdf":
            raise ParsingError(
                f"Unsupported file format: {path.suffix}. Only PDF files are supported.",
                file_path,
            )
        self._file_path = file_path
        self._documents: list[Document] | None = None

    def _load(self) -> list[Document]:
        if self._documents is None:
            try:
                self._documents = PyPDFLoader(self._file_path).load()
            except Exception as e:
                raise ParsingError(f"Failed to parse PDF: {e}", self._file_path) from e
            logger.debug(
                f"{__name__}:_load - Loaded {len(self._documents)} pages from {self._file_path}"
            )
        return self._documents

    @property
    def page_count(self) -> int | None:
        documents = self._load()
        return len(documents) or None

    def page_text(self, page_number: int) -> str:
        documents = self._load()
        if not 1 <= page_number <= len(documents):
            raise ParsingError(f"Page {page_number} out of range", self._file_path)
        return documents[page_number - 1].page_content or ""

    def full_text(self) -> str:
        return "\n".join(doc.page_content or "" for doc in self._load())
