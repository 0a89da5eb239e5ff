"""Poppler pdftops converter backend."""

from collections.abc import Mapping
from pathlib import Path

from pdfpsfilter.constants import DEFAULT_PDFTOPS_PATH
from pdfpsfilter.converters.base import ConverterBackend
from pdfpsfilter.options import target_geometry
from pdfpsfilter.profile import DeviceProfile, LanguageLevel


class PdftopsBackend(ConverterBackend):
    """Converts with Poppler's pdftops.

    Level 3 devices get level 2 output: some HP PostScript printers fail on
    pdftops' level 3 code (https://bugs.launchpad.net/bugs/277404).
    """

    name = "pdftops"

    def __init__(self, path: Path = Path(DEFAULT_PDFTOPS_PATH), native_page_sizes: bool = True):
        """
        Args:
            path: pdftops executable
            native_page_sizes: Whether this pdftops supports -origpagesizes
        """
        self.path = path
        self.native_page_sizes = native_page_sizes

    @property
    def executable(self) -> Path:
        return self.path

    def build_argv(
        self,
        input_path: Path,
        options: Mapping[str, str],
        profile: DeviceProfile | None,
    ) -> list[str]:
        argv = [self.name]

        if profile is not None:
            if profile.language_level == LanguageLevel.LEVEL1:
                argv.extend(["-level1", "-noembtt"])
            elif profile.language_level == LanguageLevel.LEVEL2:
                argv.append("-level2")
                if not profile.truetype_rasterizer:
                    argv.append("-noembtt")
            else:
                argv.append("-level2")

            geometry = target_geometry(profile, options)
            if geometry:
                width, height = geometry
                argv.extend(["-paperw", width, "-paperh", height, "-expand"])
            elif self.native_page_sizes:
                # Keep each page's own size, documents may mix page sizes
                argv.append("-origpagesizes")

        argv.extend([str(input_path), "-"])
        return argv
