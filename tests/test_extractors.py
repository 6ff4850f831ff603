"""Tests for per-format text extraction."""
from __future__ import annotations

from io import BytesIO
from unittest.mock import MagicMock, patch

import pytest

from docsift.errors import ExtractionFailed, UnsupportedFormat
from docsift.extractors import ExtractorRegistry, PlainTextExtractor, default_registry, extract
from docsift.models import DocFormat


class TestFormatResolution:
    def test_supported_suffixes(self):
        assert DocFormat.from_path("notes.txt") is DocFormat.TXT
        assert DocFormat.from_path("Report.PDF") is DocFormat.PDF
        assert DocFormat.from_path("dir/letter.docx") is DocFormat.DOCX

    def test_unsupported_suffixes_resolve_to_none(self):
        assert DocFormat.from_path("image.png") is None
        assert DocFormat.from_path("README") is None
        assert DocFormat.from_path("old.doc") is None


class TestPlainText:
    def test_decodes_utf8_verbatim(self):
        text = "Grüße, world.\n\nSecond paragraph."
        out = extract(text.encode("utf-8"), DocFormat.TXT)
        assert out.text == text

    def test_invalid_utf8_fails_extraction(self):
        with pytest.raises(ExtractionFailed) as exc:
            default_registry().extract(b"\xff\xfe\xfa\x00bad", DocFormat.TXT, "broken.txt")
        assert exc.value.doc_id == "broken.txt"
        assert "UnicodeDecodeError" in exc.value.reason


class TestRegistry:
    def test_missing_extractor_is_unsupported(self):
        registry = ExtractorRegistry()
        registry.register(PlainTextExtractor())
        with pytest.raises(UnsupportedFormat):
            registry.extract(b"%PDF-1.4", DocFormat.PDF)

    def test_dispatch_by_format_tag(self):
        registry = default_registry()
        assert isinstance(registry.get(DocFormat.TXT), PlainTextExtractor)
        assert registry.get(DocFormat.PDF) is not None
        assert registry.get(DocFormat.DOCX) is not None


class TestPdf:
    def test_pages_get_boundary_markers(self):
        pages = []
        for text in ("First page text.", None, "Third page text."):
            page = MagicMock()
            page.extract_text.return_value = text
            pages.append(page)
        pdf = MagicMock()
        pdf.pages = pages
        pdf.__enter__.return_value = pdf
        pdf.__exit__.return_value = False

        with patch("pdfplumber.open", return_value=pdf):
            out = extract(b"%PDF-fake", DocFormat.PDF)

        assert out.metadata["page_count"] == 3
        assert out.metadata["page_markers"] is True
        assert out.text.startswith("[[[PAGE 1]]]")
        assert "[[[PAGE 3]]]\nThird page text." in out.text
        assert out.text.index("First page") < out.text.index("Third page")

    def test_corrupt_pdf_fails_extraction(self):
        with pytest.raises(ExtractionFailed):
            default_registry().extract(b"this is not a pdf at all", DocFormat.PDF, "bad.pdf")


class TestDocx:
    def _docx_bytes(self, paragraphs: list[str]) -> bytes:
        import docx

        document = docx.Document()
        for p in paragraphs:
            document.add_paragraph(p)
        buf = BytesIO()
        document.save(buf)
        return buf.getvalue()

    def test_paragraphs_in_document_order(self):
        data = self._docx_bytes(["Opening line.", "", "Middle part.", "Closing words."])
        out = extract(data, DocFormat.DOCX)
        assert out.text == "Opening line.\n\nMiddle part.\n\nClosing words."
        assert out.metadata["paragraph_count"] == 3

    def test_table_text_in_document_order(self):
        import docx

        document = docx.Document()
        document.add_paragraph("Intro line.")
        table = document.add_table(rows=2, cols=2)
        table.cell(0, 0).text = "quarterly"
        table.cell(0, 1).text = "revenue"
        table.cell(1, 0).text = "Q1"
        document.add_paragraph("After the table.")
        buf = BytesIO()
        document.save(buf)

        out = extract(buf.getvalue(), DocFormat.DOCX)

        assert out.text == "Intro line.\n\nquarterly\n\nrevenue\n\nQ1\n\nAfter the table."
        assert out.metadata["table_count"] == 1

    def test_merged_cell_read_once(self):
        import docx

        document = docx.Document()
        table = document.add_table(rows=1, cols=3)
        merged = table.cell(0, 0).merge(table.cell(0, 1))
        merged.text = "spanning"
        table.cell(0, 2).text = "single"
        buf = BytesIO()
        document.save(buf)

        out = extract(buf.getvalue(), DocFormat.DOCX)

        assert out.text == "spanning\n\nsingle"

    def test_corrupt_docx_fails_extraction(self):
        with pytest.raises(ExtractionFailed):
            default_registry().extract(b"PK\x03\x04 truncated zip", DocFormat.DOCX, "bad.docx")
