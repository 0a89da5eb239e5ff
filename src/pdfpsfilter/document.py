"""Inspection of the input PDF."""

from pathlib import Path

from pypdf import PdfReader

from pdfpsfilter.logging_config import get_logger

logger = get_logger(__name__)


def count_pages(pdf_path: Path) -> int | None:
    """Number of pages of a PDF, or None if it cannot be read.

    An unreadable document is not an error here: the converter gets it
    anyway and reports what is wrong with it.
    """
    try:
        reader = PdfReader(str(pdf_path))
        return len(reader.pages)
    except Exception as e:
        logger.warning("Could not read %s for page count: %s", pdf_path, e)
        return None
