"""Post-processing stage inserting quirk fixes into the PostScript prolog.

The stage copies the converter's output unchanged, except that the fix
snippets are placed at the start of the prolog, before the first active
PostScript code. When the converter emitted no prolog section, one is
created around the snippets in front of the first setup or page section.

Run as a pipeline stage:

    python -m pdfpsfilter.rewriter kyocera-bind < in.ps > out.ps
"""

import argparse
import os
import sys
from collections.abc import Iterable, Iterator, Sequence
from enum import Enum
from itertools import islice
from typing import BinaryIO

from pdfpsfilter.constants import BEGIN_PROLOG, BEGIN_SETUP, END_PROLOG, PAGE
from pdfpsfilter.logging_config import get_logger, setup_logging
from pdfpsfilter.quirks import QUIRKS_BY_ID, QuirkFix, get_quirks

logger = get_logger(__name__)

SECTION_MARKERS = (BEGIN_PROLOG, END_PROLOG, BEGIN_SETUP, PAGE)


class RewriterState(Enum):
    COPYING = "copying"
    INJECT_AFTER_OPEN = "inject-after-open"
    SYNTHESIZE_AND_INJECT = "synthesize-and-inject"
    TAIL = "tail"


def _strip_eol(line: bytes) -> bytes:
    return line.rstrip(b"\r\n")


def _fix_block(fixes: Sequence[QuirkFix]) -> Iterator[bytes]:
    for fix in fixes:
        logger.debug("%s", fix.description)
        yield fix.snippet


def rewrite_stream(lines: Iterable[bytes], fixes: Sequence[QuirkFix]) -> Iterator[bytes]:
    """Copy PostScript lines, inserting the fix snippets into the prolog.

    Args:
        lines: Input lines including their line endings (single pass)
        fixes: Fixes to insert, in order

    Yields:
        Output data, line by line
    """
    block_lines = [line.encode("latin-1") for fix in fixes for line in fix.lines]
    source = iter(lines)
    state = RewriterState.COPYING
    found = b""

    while True:
        if state is RewriterState.COPYING:
            for line in source:
                if line.startswith(SECTION_MARKERS):
                    found = line
                    break
                yield line
            else:
                # No structure at all, nothing to insert into
                return
            if found.startswith(BEGIN_PROLOG):
                state = RewriterState.INJECT_AFTER_OPEN
            else:
                state = RewriterState.SYNTHESIZE_AND_INJECT

        elif state is RewriterState.INJECT_AFTER_OPEN:
            yield found
            following = list(islice(source, len(block_lines)))
            if [_strip_eol(line) for line in following] == block_lines:
                logger.debug("Workaround PostScript code already present, not inserting it again")
            else:
                yield from _fix_block(fixes)
            yield from following
            state = RewriterState.TAIL

        elif state is RewriterState.SYNTHESIZE_AND_INJECT:
            logger.debug("Adding Prolog section for workaround PostScript code")
            yield BEGIN_PROLOG + b"\n"
            yield from _fix_block(fixes)
            if not found.startswith(END_PROLOG):
                yield END_PROLOG + b"\n"
            yield found
            state = RewriterState.TAIL

        else:
            yield from source
            return


def filter_stream(infile: BinaryIO, outfile: BinaryIO, fixes: Sequence[QuirkFix]) -> None:
    """Run the rewriter from one binary stream to another."""
    for chunk in rewrite_stream(infile, fixes):
        outfile.write(chunk)
    outfile.flush()


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m pdfpsfilter.rewriter",
        description="Insert printer quirk fixes into the prolog of a PostScript stream (stdin to stdout).",
    )
    parser.add_argument(
        "fixes",
        nargs="+",
        choices=sorted(QUIRKS_BY_ID),
        help="Identifiers of the fixes to insert, in order",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log debug messages",
    )
    return parser


def main(args: list[str] | None = None) -> int:
    """Entry point of the post-processing stage."""
    parsed = create_parser().parse_args(args)
    setup_logging(verbosity=parsed.verbose)

    try:
        filter_stream(sys.stdin.buffer, sys.stdout.buffer, get_quirks(parsed.fixes))
    except BrokenPipeError:
        logger.error("Output pipe closed before the end of the PostScript data")
        # Python flushes stdout again on exit, point it somewhere harmless
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
