"""Unified exception hierarchy for pdfpsfilter.

All pdfpsfilter exceptions inherit from PdfPsFilterError, enabling:
- Catching all filter errors with `except PdfPsFilterError`
- Error context preservation via the `context` attribute
- Causality chains via `raise ... from e` patterns
"""

from typing import Any


class PdfPsFilterError(Exception):
    """Base exception for all pdfpsfilter errors.

    Args:
        message: Human-readable error description
        context: Optional dict of contextual information (file, stage, etc.)
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}

    def __str__(self) -> str:
        base = super().__str__()
        if self.context:
            details = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{base} [{details}]"
        return base


class ConfigError(PdfPsFilterError):
    """Raised when the filter configuration is invalid or cannot be loaded."""


class ProfileError(PdfPsFilterError):
    """Raised when a device profile (PPD or YAML) cannot be parsed."""


class InputError(PdfPsFilterError):
    """Raised when the print data cannot be read or spooled."""


class PipelineError(PdfPsFilterError):
    """Raised when a pipe cannot be created or a stage cannot be started.

    Attributes:
        spawned: Handles of the stages started before the failure. They
            still have to be reaped by the caller.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        spawned: list | None = None,
    ):
        super().__init__(message, context)
        self.spawned = spawned or []
