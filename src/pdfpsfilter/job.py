"""Print job request and input spooling."""

import os
import shutil
import sys
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from pdfpsfilter.exceptions import InputError
from pdfpsfilter.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class JobRequest:
    """A print job as handed to the filter on its command line."""
    printer: str
    job_id: str
    user: str
    title: str
    copies: int
    options: str
    input_path: Path | None = None


@contextmanager
def spooled_input(job: JobRequest, stdin: BinaryIO | None = None) -> Iterator[Path]:
    """Yield a readable path holding the job's print data.

    Without an input path on the command line, standard input is copied to a
    temporary file which is removed when the context exits, whether the run
    succeeded or not.

    Raises:
        InputError: If standard input cannot be copied.
    """
    if job.input_path is not None:
        yield job.input_path
        return

    source = stdin if stdin is not None else sys.stdin.buffer
    try:
        fd, name = tempfile.mkstemp(prefix="pdfpsfilter-", suffix=".pdf")
    except OSError as e:
        raise InputError(f"Unable to create temporary print file: {e}") from e

    spool_path = Path(name)
    try:
        logger.debug("Copying print data to temporary file \"%s\"", spool_path)
        try:
            with os.fdopen(fd, "wb") as out:
                shutil.copyfileobj(source, out)
        except OSError as e:
            raise InputError(f"Unable to copy print data: {e}", context={"file": spool_path}) from e
        yield spool_path
    finally:
        spool_path.unlink(missing_ok=True)
