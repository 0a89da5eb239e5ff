"""Factory function for converter backend selection."""

from typing import TYPE_CHECKING

from pdfpsfilter.config import ConverterName, ConverterSettings

if TYPE_CHECKING:
    from pdfpsfilter.converters.base import ConverterBackend


def get_converter(settings: ConverterSettings) -> "ConverterBackend":
    """Get the converter backend selected in the configuration.

    Args:
        settings: Converter section of the filter configuration

    Returns:
        ConverterBackend instance

    Raises:
        ValueError: If the backend name is not recognized
    """
    backends = {
        ConverterName.PDFTOPS: lambda: _get_pdftops(settings),
        ConverterName.GHOSTSCRIPT: lambda: _get_ghostscript(settings),
    }

    if settings.backend not in backends:
        available = ", ".join(sorted(name.value for name in backends))
        raise ValueError(f"Unknown converter backend: '{settings.backend}'. Available: {available}")

    return backends[settings.backend]()


def _get_pdftops(settings: ConverterSettings) -> "ConverterBackend":
    from pdfpsfilter.converters.pdftops import PdftopsBackend
    return PdftopsBackend(settings.pdftops_path, native_page_sizes=settings.native_page_sizes)


def _get_ghostscript(settings: ConverterSettings) -> "ConverterBackend":
    from pdfpsfilter.converters.ghostscript import GhostscriptBackend
    return GhostscriptBackend(settings.ghostscript_path, device=settings.ghostscript_device)
