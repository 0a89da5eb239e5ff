"""Tests for pdfpsfilter.document module."""

from pdfpsfilter.document import count_pages


class TestCountPages:

    def test_pages(self, temp_dir, pdf_factory):
        assert count_pages(pdf_factory(temp_dir / "three.pdf", num_pages=3)) == 3

    def test_empty_document(self, temp_dir, pdf_factory):
        assert count_pages(pdf_factory(temp_dir / "empty.pdf", num_pages=0)) == 0

    def test_not_a_pdf(self, temp_dir, caplog):
        path = temp_dir / "garbage.pdf"
        path.write_bytes(b"this is not a PDF")

        assert count_pages(path) is None
        assert "Could not read" in caplog.text

    def test_missing(self, temp_dir):
        assert count_pages(temp_dir / "missing.pdf") is None
