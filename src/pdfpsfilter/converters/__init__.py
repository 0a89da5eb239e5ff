"""Converter package with backend abstraction for the conversion stage."""

from pdfpsfilter.converters.base import ConverterBackend
from pdfpsfilter.converters.factory import get_converter
from pdfpsfilter.converters.ghostscript import GhostscriptBackend
from pdfpsfilter.converters.pdftops import PdftopsBackend

__all__ = [
    "ConverterBackend",
    "GhostscriptBackend",
    "PdftopsBackend",
    "get_converter",
]
