"""Detection of settings left in the PDF header by an upstream pdftopdf run.

pdftopdf applies page management (copies, collation, N-up, ...) itself and
records what the device still has to do in comment lines right after the
"%PDF" header:

    %PDF-1.4
    %%PDFTOPDFNumCopies : 2
    %%PDFTOPDFCollate : true
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from itertools import dropwhile, islice
from pathlib import Path

from pdfpsfilter.constants import (
    MAX_CHECK_COMMENT_LINES,
    PDF_START_MARKER,
    PDFTOPDF_COLLATE,
    PDFTOPDF_COPIES,
    PDFTOPDF_GENERATED,
)
from pdfpsfilter.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class UpstreamMetadata:
    """What pdftopdf reported about the job.

    Attributes:
        copies: Copy count the device still has to produce, if given
        collate: True if pdftopdf found the device collates in hardware
        applied: True once any pdftopdf directive was seen
    """
    copies: str | None = None
    collate: bool = False
    applied: bool = False


def _directive_value(line: bytes, key: bytes) -> str | None:
    """Return the stripped text after the ':' of a directive, or None."""
    _, sep, value = line[len(key):].partition(b":")
    if not sep:
        return None
    value = value.strip()
    if not value:
        return None
    return value.decode("latin-1")


def parse_header_comments(lines: Iterable[bytes]) -> UpstreamMetadata | None:
    """Parse pdftopdf directives from a sequence of raw file lines.

    Lines before the "%PDF" header are skipped; then at most
    MAX_CHECK_COMMENT_LINES lines are examined. Directives can come in any
    order, the last occurrence of a repeated one wins.

    Returns:
        UpstreamMetadata, or None if no directive was found
    """
    body: Iterator[bytes] = dropwhile(lambda line: not line.startswith(PDF_START_MARKER), lines)
    if next(body, None) is None:
        return None

    copies = None
    collate = False
    applied = False

    for line in islice(body, MAX_CHECK_COMMENT_LINES):
        if line.startswith(PDFTOPDF_COPIES):
            value = _directive_value(line, PDFTOPDF_COPIES)
            if value is not None:
                copies = value
                applied = True
        elif line.startswith(PDFTOPDF_COLLATE):
            value = _directive_value(line, PDFTOPDF_COLLATE)
            if value is not None:
                collate = value.lower().startswith("true")
                applied = True
        elif line.rstrip(b"\r\n") == PDFTOPDF_GENERATED:
            applied = True

    if not applied:
        return None
    return UpstreamMetadata(copies=copies, collate=collate, applied=applied)


def sniff_upstream_metadata(path: Path) -> UpstreamMetadata | None:
    """Read pdftopdf directives from the head of a print file.

    A file that cannot be opened is reported and treated as carrying no
    directives.
    """
    try:
        with open(path, "rb") as f:
            metadata = parse_header_comments(f)
    except OSError as e:
        logger.error("Cannot open print file \"%s\": %s", path, e)
        return None

    if metadata is not None:
        logger.debug(
            "pdftopdf already applied: copies=%s, collate=%s",
            metadata.copies,
            metadata.collate,
        )
    return metadata
