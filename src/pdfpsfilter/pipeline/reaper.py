"""Job cancellation and reaping of pipeline stages."""

import signal
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from pdfpsfilter.logging_config import get_logger
from pdfpsfilter.pipeline.stages import OutcomeKind, StageHandle, StageOutcome
from pdfpsfilter.pipeline.supervisor import StageSupervisor

logger = get_logger(__name__)


class CancellationFlag:
    """Process-wide "job canceled" flag.

    The signal handler only sets it; the reaper reads and clears it from its
    normal control flow. Single attribute stores keep it lock-free: the
    handler runs on the main thread, where a lock held by consume() would
    never be released.
    """

    def __init__(self):
        self._canceled = False

    def set(self) -> None:
        self._canceled = True

    def is_set(self) -> bool:
        return self._canceled

    def consume(self) -> bool:
        """Return whether the flag was set, clearing it."""
        canceled = self._canceled
        self._canceled = False
        return canceled

    def handler(self, signum, frame) -> None:
        self.set()


@contextmanager
def cancellation_handler(flag: CancellationFlag, signum: int = signal.SIGTERM) -> Iterator[CancellationFlag]:
    """Set the flag when `signum` arrives while the context is active."""
    previous = signal.signal(signum, flag.handler)
    try:
        yield flag
    finally:
        signal.signal(signum, previous)


@dataclass
class PipelineResult:
    """Aggregate outcome of a pipeline run.

    Attributes:
        exit_status: Last non-zero exit status or crash signal, 0 if all clean
        outcomes: Outcome per stage name
        canceled: True if a cancellation request was acted upon
    """
    exit_status: int = 0
    outcomes: dict[str, StageOutcome] = field(default_factory=dict)
    canceled: bool = False


def _record(result: PipelineResult, handle: StageHandle, outcome: StageOutcome) -> None:
    result.outcomes[handle.name] = outcome

    if outcome.kind is OutcomeKind.OK:
        logger.debug("PID %d (%s) exited with no errors.", handle.pid, handle.name)
    elif outcome.kind is OutcomeKind.FAILED:
        result.exit_status = outcome.code
        logger.warning("PID %d (%s) stopped with status %d!", handle.pid, handle.name, outcome.code)
    elif outcome.kind is OutcomeKind.TERMINATED:
        logger.debug("PID %d (%s) was terminated normally with signal %d!", handle.pid, handle.name, outcome.code)
    else:
        result.exit_status = outcome.code
        logger.error("PID %d (%s) crashed on signal %d!", handle.pid, handle.name, outcome.code)


def reap(supervisor: StageSupervisor, handles: list[StageHandle], cancel_flag: CancellationFlag) -> PipelineResult:
    """Wait for every stage to end, forwarding cancellation requests.

    Each time the flag is found set, every stage still running gets SIGTERM
    once and the flag is cleared. The wait stops early only if the
    supervisor reports there is nothing left to wait for.
    """
    result = PipelineResult()
    outstanding = {handle.pid: handle for handle in handles}

    while outstanding:
        if cancel_flag.consume():
            result.canceled = True
            logger.debug("Job canceled, terminating %d stage(s)", len(outstanding))
            for handle in outstanding.values():
                supervisor.terminate(handle)

        try:
            pid, outcome = supervisor.wait_any()
        except InterruptedError:
            continue
        except ChildProcessError as e:
            logger.error("Unable to wait for pipeline stages: %s", e)
            break

        handle = outstanding.pop(pid, None)
        if handle is None:
            logger.debug("Reaped unknown child PID %d", pid)
            continue
        _record(result, handle, outcome)

    return result
