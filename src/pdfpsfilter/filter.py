"""PDF to PostScript filter: builds the stage pipeline for a job and runs it.

    conversion (pdftops | gs)  ->  [post-processing]  ->  imposition (pstops)

The post-processing stage is only part of the pipeline when the printer
needs quirk fixes in its PostScript.
"""

import sys
from contextlib import nullcontext
from pathlib import Path

from pdfpsfilter.config import FilterConfig
from pdfpsfilter.converters import get_converter
from pdfpsfilter.document import count_pages
from pdfpsfilter.exceptions import ProfileError
from pdfpsfilter.job import JobRequest, spooled_input
from pdfpsfilter.logging_config import console_debug_enabled, get_logger
from pdfpsfilter.options import imposition_copies, imposition_options, parse_options
from pdfpsfilter.pipeline import (
    CancellationFlag,
    PipelineOrchestrator,
    PipelineResult,
    ProcessSupervisor,
    StageRole,
    StageSpec,
    StageSupervisor,
    cancellation_handler,
)
from pdfpsfilter.profile import DeviceProfile, load_device_profile
from pdfpsfilter.quirks import QuirkFix, resolve_quirks
from pdfpsfilter.sniffer import UpstreamMetadata, sniff_upstream_metadata

logger = get_logger(__name__)


def load_profile(config: FilterConfig, options: dict[str, str]) -> DeviceProfile | None:
    """Load the queue's device profile; without one no device flags are used."""
    if config.profile is None:
        logger.debug("No device profile configured")
        return None
    try:
        return load_device_profile(config.profile, options)
    except ProfileError as e:
        logger.warning("%s, continuing without device profile", e)
        return None


def rewriter_spec(fixes: tuple[QuirkFix, ...]) -> StageSpec:
    """Post-processing stage running this package's rewriter.

    The stage logs its debug messages too when this process does.
    """
    verbose = ("-v",) if console_debug_enabled() else ()
    argv = (sys.executable, "-m", "pdfpsfilter.rewriter", *verbose, *(fix.id for fix in fixes))
    return StageSpec(
        executable=sys.executable,
        argv=argv,
        role=StageRole.REWRITER,
        name="post-processing",
    )


def imposition_spec(job: JobRequest, metadata: UpstreamMetadata | None, config: FilterConfig) -> StageSpec:
    """Imposition stage, called with the usual filter arguments (no file)."""
    argv = (
        job.printer,
        job.job_id,
        job.user,
        job.title,
        imposition_copies(job, metadata),
        imposition_options(job.options, metadata),
    )
    return StageSpec(
        executable=str(config.imposition.path),
        argv=argv,
        role=StageRole.IMPOSITION,
        name=config.imposition.filter,
    )


def build_stage_specs(
    job: JobRequest,
    input_path: Path,
    config: FilterConfig,
    metadata: UpstreamMetadata | None,
    profile: DeviceProfile | None,
) -> list[StageSpec]:
    """Describe every pipeline stage, in pipeline order."""
    options = parse_options(job.options)
    converter = get_converter(config.converter)
    specs = [converter.stage_spec(input_path, options, profile)]

    if profile is not None and config.quirks.enabled:
        fixes = resolve_quirks(profile.manufacturer)
        if fixes:
            specs.append(rewriter_spec(fixes))

    specs.append(imposition_spec(job, metadata, config))
    return specs


def run_filter(
    job: JobRequest,
    config: FilterConfig,
    supervisor: StageSupervisor | None = None,
    cancel_flag: CancellationFlag | None = None,
) -> PipelineResult:
    """Convert the job's PDF into PostScript on standard output.

    SIGTERM cancels the job: every running stage is terminated and the
    spooled input, if any, is removed.

    Args:
        job: The print job
        config: Filter configuration
        supervisor: Stage supervisor (real processes if None)
        cancel_flag: Flag set on SIGTERM (a new one if None)

    Raises:
        InputError: If standard input cannot be spooled
    """
    flag = cancel_flag if cancel_flag is not None else CancellationFlag()

    with cancellation_handler(flag), spooled_input(job) as input_path:
        metadata = sniff_upstream_metadata(input_path)

        if count_pages(input_path) == 0:
            logger.info("No pages in the document, nothing to print")
            return PipelineResult()

        profile = load_profile(config, parse_options(job.options))
        specs = build_stage_specs(job, input_path, config, metadata, profile)

        context = ProcessSupervisor() if supervisor is None else nullcontext(supervisor)
        with context as active:
            result = PipelineOrchestrator(active, flag).run(specs)

    if result.canceled:
        logger.info("Job %s canceled", job.job_id)
    return result
