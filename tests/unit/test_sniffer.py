"""Tests for pdfpsfilter.sniffer module."""

import pytest

from pdfpsfilter.sniffer import UpstreamMetadata, parse_header_comments, sniff_upstream_metadata


def _lines(*lines: str) -> list[bytes]:
    return [line.encode("latin-1") + b"\n" for line in lines]


class TestParseHeaderComments:
    """Test parsing of pdftopdf header directives."""

    def test_no_directives(self):
        assert parse_header_comments(_lines("%PDF-1.4", "1 0 obj")) is None

    def test_no_pdf_header(self):
        assert parse_header_comments(_lines("%%PDFTOPDFNumCopies : 2")) is None

    def test_copies_and_collate(self):
        metadata = parse_header_comments(
            _lines("%PDF-1.4", "%%PDFTOPDFNumCopies : 2", "%%PDFTOPDFCollate : true")
        )
        assert metadata == UpstreamMetadata(copies="2", collate=True, applied=True)

    def test_order_does_not_matter(self):
        metadata = parse_header_comments(
            _lines("%PDF-1.4", "%%PDFTOPDFCollate : TRUE", "%%PDFTOPDFNumCopies : 5")
        )
        assert metadata == UpstreamMetadata(copies="5", collate=True, applied=True)

    def test_collate_false(self):
        metadata = parse_header_comments(_lines("%PDF-1.4", "%%PDFTOPDFCollate : false"))
        assert metadata == UpstreamMetadata(copies=None, collate=False, applied=True)

    def test_generated_marker_alone(self):
        metadata = parse_header_comments(_lines("%PDF-1.4", "% This file was generated by pdftopdf"))
        assert metadata == UpstreamMetadata(copies=None, collate=False, applied=True)

    def test_generated_marker_with_crlf(self):
        metadata = parse_header_comments([b"%PDF-1.4\r\n", b"% This file was generated by pdftopdf\r\n"])
        assert metadata is not None and metadata.applied

    def test_last_occurrence_wins(self):
        metadata = parse_header_comments(
            _lines(
                "%PDF-1.4",
                "%%PDFTOPDFNumCopies : 2",
                "%%PDFTOPDFCollate : true",
                "%%PDFTOPDFNumCopies : 7",
                "%%PDFTOPDFCollate : false",
            )
        )
        assert metadata == UpstreamMetadata(copies="7", collate=False, applied=True)

    def test_leading_garbage_skipped(self):
        metadata = parse_header_comments(_lines("junk", "%PDF-1.7", "%%PDFTOPDFNumCopies : 1"))
        assert metadata.copies == "1"

    def test_directive_on_header_line_ignored(self):
        assert parse_header_comments([b"%PDF-1.4 %%PDFTOPDFNumCopies : 2\n", b"1 0 obj\n"]) is None

    def test_directive_without_colon_ignored(self):
        assert parse_header_comments(_lines("%PDF-1.4", "%%PDFTOPDFNumCopies 2")) is None

    def test_directive_with_empty_value_ignored(self):
        assert parse_header_comments(_lines("%PDF-1.4", "%%PDFTOPDFNumCopies :   ")) is None

    def test_whitespace_around_value(self):
        metadata = parse_header_comments(_lines("%PDF-1.4", "%%PDFTOPDFNumCopies:\t12 "))
        assert metadata.copies == "12"

    @pytest.mark.parametrize("position,found", [(20, True), (21, False)])
    def test_only_first_lines_checked(self, position, found):
        filler = ["%comment"] * (position - 1)
        metadata = parse_header_comments(_lines("%PDF-1.4", *filler, "%%PDFTOPDFNumCopies : 4"))
        assert (metadata is not None) is found

    def test_reads_lazily(self):
        def lines():
            yield b"%PDF-1.4\n"
            yield b"%%PDFTOPDFNumCopies : 2\n"
            for _ in range(19):
                yield b"%filler\n"
            raise AssertionError("read past the comment lines")

        assert parse_header_comments(lines()).copies == "2"


class TestSniffUpstreamMetadata:
    """Test reading directives from a print file."""

    def test_pdftopdf_file(self, pdftopdf_pdf):
        metadata = sniff_upstream_metadata(pdftopdf_pdf)
        assert metadata == UpstreamMetadata(copies="3", collate=True, applied=True)

    def test_plain_file(self, temp_pdf):
        assert sniff_upstream_metadata(temp_pdf) is None

    def test_missing_file(self, temp_dir, caplog):
        assert sniff_upstream_metadata(temp_dir / "missing.pdf") is None
        assert "Cannot open print file" in caplog.text
