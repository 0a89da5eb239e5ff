"""Abstract base class for conversion backends."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path

from pdfpsfilter.pipeline.stages import StageRole, StageSpec
from pdfpsfilter.profile import DeviceProfile


class ConverterBackend(ABC):
    """Abstract base class for PDF to PostScript converters.

    Each converter (Poppler's pdftops, Ghostscript) implements this
    interface by translating the job options and the device profile into
    its own command-line dialect.

    Example:
        converter = get_converter(config.converter)
        spec = converter.stage_spec(input_path, options, profile)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier, also argv[0] of the stage (e.g., 'pdftops', 'gs')."""

    @property
    @abstractmethod
    def executable(self) -> Path:
        """Path of the converter program."""

    @abstractmethod
    def build_argv(
        self,
        input_path: Path,
        options: Mapping[str, str],
        profile: DeviceProfile | None,
    ) -> list[str]:
        """Build the converter's argument vector.

        Args:
            input_path: PDF file to convert
            options: Parsed job options
            profile: Device profile, or None if the queue has none

        Returns:
            Argument vector including argv[0]; output goes to stdout
        """

    def stage_spec(
        self,
        input_path: Path,
        options: Mapping[str, str],
        profile: DeviceProfile | None,
    ) -> StageSpec:
        return StageSpec(
            executable=str(self.executable),
            argv=tuple(self.build_argv(input_path, options, profile)),
            role=StageRole.CONVERSION,
            name=self.name,
        )
