"""Command-line interface for pdfpsfilter.

Called by the print spooler like any CUPS filter:

    pdfpsfilter printer job user title copies options [file]
"""

import argparse
import os
import sys
from pathlib import Path

from pdfpsfilter import __version__
from pdfpsfilter.constants import ENV_CONFIG
from pdfpsfilter.logging_config import get_logger

logger = get_logger(__name__)


class FilterArgumentParser(argparse.ArgumentParser):
    """Argument parser exiting with status 1 on usage errors."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"ERROR: {self.prog}: {message}\n")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = FilterArgumentParser(
        prog="pdfpsfilter",
        description="Convert a PDF print job to PostScript through pdftops/gs, quirk post-processing and pstops.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  PPD                   Device profile (PPD or YAML) of the destination queue
  CUPS_SERVERBIN        Directory containing filter/pstops
  PDFPSFILTER_CONFIG    Configuration file used when --config is not given

Examples:
  pdfpsfilter lp 42 alice report 1 "fit-to-page media=A4" report.pdf > out.ps
  cat report.pdf | pdfpsfilter lp 42 alice report 2 "" > out.ps
""",
    )

    parser.add_argument("printer", help="Destination printer (queue) name")
    parser.add_argument("job_id", help="Job ID")
    parser.add_argument("user", help="Name of the user who submitted the job")
    parser.add_argument("title", help="Job title")
    parser.add_argument("copies", type=int, help="Number of copies requested")
    parser.add_argument("options", help="Job options, e.g. \"fit-to-page landscape media=A4\"")
    parser.add_argument(
        "file",
        nargs="?",
        type=Path,
        help="PDF file to print (default: read standard input)",
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to YAML configuration file",
    )

    # Logging options
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log debug messages",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress all messages except errors",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        help="Write logs to file (includes all levels)",
    )

    return parser


def main(args: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    from pdfpsfilter.logging_config import setup_logging

    setup_logging(
        verbosity=parsed.verbose,
        quiet=parsed.quiet,
        log_file=parsed.log_file,
    )

    from pdfpsfilter.config import load_config
    from pdfpsfilter.exceptions import ConfigError, InputError, PdfPsFilterError

    config_path = parsed.config
    if config_path is None and os.environ.get(ENV_CONFIG):
        config_path = Path(os.environ[ENV_CONFIG])

    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 1

    from pdfpsfilter.filter import run_filter
    from pdfpsfilter.job import JobRequest

    job = JobRequest(
        printer=parsed.printer,
        job_id=parsed.job_id,
        user=parsed.user,
        title=parsed.title,
        copies=parsed.copies,
        options=parsed.options,
        input_path=parsed.file,
    )

    try:
        result = run_filter(job, config)
    except InputError as e:
        logger.error("Unable to read print data: %s", e)
        return 1
    except PdfPsFilterError as e:
        logger.error("%s", e)
        return 1

    return result.exit_status


if __name__ == "__main__":
    sys.exit(main())
