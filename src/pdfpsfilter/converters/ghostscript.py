"""Ghostscript converter backend."""

from collections.abc import Mapping
from pathlib import Path

from pdfpsfilter.constants import DEFAULT_GHOSTSCRIPT_DEVICE, DEFAULT_GHOSTSCRIPT_PATH
from pdfpsfilter.converters.base import ConverterBackend
from pdfpsfilter.logging_config import get_logger
from pdfpsfilter.options import is_true, target_geometry
from pdfpsfilter.profile import DeviceProfile
from pdfpsfilter.quirks import manufacturer_matches

logger = get_logger(__name__)


class GhostscriptBackend(ConverterBackend):
    """Converts with Ghostscript's ps2write (or pswrite) device."""

    name = "gs"

    def __init__(self, path: Path = Path(DEFAULT_GHOSTSCRIPT_PATH), device: str = DEFAULT_GHOSTSCRIPT_DEVICE):
        self.path = path
        self.device = device

    @property
    def executable(self) -> Path:
        return self.path

    def build_argv(
        self,
        input_path: Path,
        options: Mapping[str, str],
        profile: DeviceProfile | None,
    ) -> list[str]:
        argv = [
            self.name,
            "-q",
            "-dNOPAUSE",
            "-dBATCH",
            "-dSAFER",
            f"-sDEVICE={self.device}",
            "-sOUTPUTFILE=%stdout",
        ]

        if profile is not None:
            argv.append(f"-dLanguageLevel={int(profile.language_level)}")
            geometry = target_geometry(profile, options)
            if geometry:
                width, height = geometry
                argv.extend([f"-dDEVICEWIDTHPOINTS={width}", f"-dDEVICEHEIGHTPOINTS={height}"])

        # "lpr -o psdebug": uncompressed pages and fonts, for analysing what
        # a misbehaving printer got
        if is_true(options.get("psdebug")):
            logger.debug("Deactivated compression of pages and fonts in Ghostscript's PostScript output (\"psdebug\" debug mode)")
            argv.extend(["-dCompressPages=false", "-dCompressFonts=false"])

        # BR-Script's CCITTFaxDecode filter is broken
        if profile is not None and manufacturer_matches(profile.manufacturer, "Brother"):
            logger.debug("Deactivated CCITT compression of glyphs and images as workaround for Brother printers")
            argv.extend(["-dNoT3CCITT", "-dEncodeMonoImages=false"])

        argv.extend(["-c", "save pop", "-f", str(input_path)])
        return argv
