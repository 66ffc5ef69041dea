"""Tests for page text sources."""

from unittest.mock import patch

import pytest
from langchain_core.documents import Document

from ragpipe.core.document_processing.tasks import PdfPageSource, TextPageSource
from ragpipe.core.exceptions import ParsingError

LOADER = "ragpipe.core.document_processing.tasks.parsing_task.PyPDFLoader"


@pytest.fixture
def pdf_file(tmp_path):
    path = tmp_path / "doc.pdf"
    path.write_bytes(b"%PDF-1.4")
    return str(path)


class TestTextPageSource:
    """Tests for TextPageSource."""

    def test_pages(self) -> None:
        source = TextPageSource(pages=["one", "", "three"])

        assert source.page_count == 3
        assert source.page_text(3) == "three"
        assert source.full_text() == "one\n\nthree"

    def test_unknown_page_count(self) -> None:
        source = TextPageSource(text="merged text")

        assert source.page_count is None
        assert source.full_text() == "merged text"

    def test_out_of_range(self) -> None:
        with pytest.raises(ParsingError):
            TextPageSource(pages=["one"]).page_text(2)


class TestPdfPageSource:
    """Tests for PdfPageSource."""

    def test_reads_pages(self, pdf_file) -> None:
        with patch(LOADER) as loader:
            loader.return_value.load.return_value = [
                Document(page_content="first", metadata={"page": 0}),
                Document(page_content="", metadata={"page": 1}),
            ]
            source = PdfPageSource(pdf_file)

            assert source.page_count == 2
            assert source.page_text(1) == "first"
            assert source.page_text(2) == ""
            assert source.full_text() == "first\n"

        loader.assert_called_once_with(pdf_file)
        loader.return_value.load.assert_called_once()

    def test_no_pages_reports_unknown_count(self, pdf_file) -> None:
        with patch(LOADER) as loader:
            loader.return_value.load.return_value = []

            assert PdfPageSource(pdf_file).page_count is None

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ParsingError, match="File not found"):
            PdfPageSource(str(tmp_path / "missing.pdf"))

    def test_non_pdf_rejected(self, tmp_path) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        with pytest.raises(ParsingError, match="Unsupported file format"):
            PdfPageSource(str(path))

    def test_loader_failure_wrapped(self, pdf_file) -> None:
        with patch(LOADER) as loader:
            loader.return_value.load.side_effect = RuntimeError("corrupt xref")

            with pytest.raises(ParsingError, match="corrupt xref"):
                PdfPageSource(pdf_file).page_count
