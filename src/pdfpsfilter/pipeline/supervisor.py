"""Process supervision for pipeline stages."""

import os
import select
import signal
import subprocess
from abc import ABC, abstractmethod

from pdfpsfilter.exceptions import PipelineError
from pdfpsfilter.logging_config import get_logger
from pdfpsfilter.pipeline.stages import StageHandle, StageOutcome, StageSpec

logger = get_logger(__name__)


class StageSupervisor(ABC):
    """Starts, waits for and signals pipeline stages.

    The orchestrator and the reaper only talk to this interface, so the
    pipeline topology can be tested with MockSupervisor instead of real
    processes.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Supervisor identifier (e.g., 'process', 'mock')."""

    @abstractmethod
    def spawn(self, spec: StageSpec, stdin: int | None = None, stdout: int | None = None) -> StageHandle:
        """Start a stage with the given descriptors as standard input/output.

        None means the stage inherits the descriptor of this process.

        Raises:
            PipelineError: If the stage cannot be started
        """

    @abstractmethod
    def wait_any(self) -> tuple[int, StageOutcome]:
        """Block until any started stage ends.

        Returns:
            Process ID and outcome of the stage

        Raises:
            InterruptedError: If a cancellation request arrived while waiting
            ChildProcessError: If there is nothing left to wait for
        """

    @abstractmethod
    def terminate(self, handle: StageHandle) -> None:
        """Ask a stage to terminate (SIGTERM)."""


def _ignore_signal(signum, frame) -> None:
    pass


class ProcessSupervisor(StageSupervisor):
    """Runs stages as child processes.

    While open, SIGCHLD and SIGTERM wake up wait_any() through a descriptor
    registered with signal.set_wakeup_fd(), so a cancellation request
    interrupts the wait even though os.waitpid() itself is retried after
    signals. Must be opened from the main thread.

    Example:
        with ProcessSupervisor() as supervisor:
            handle = supervisor.spawn(spec)
            pid, outcome = supervisor.wait_any()
    """

    name = "process"

    def __init__(self):
        self._processes: dict[int, subprocess.Popen] = {}
        self._wakeup: tuple[int, int] | None = None
        self._previous_wakeup_fd = -1
        self._previous_sigchld = None

    def __enter__(self) -> "ProcessSupervisor":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        read_fd, write_fd = os.pipe()
        os.set_blocking(read_fd, False)
        os.set_blocking(write_fd, False)
        self._wakeup = (read_fd, write_fd)
        self._previous_sigchld = signal.signal(signal.SIGCHLD, _ignore_signal)
        self._previous_wakeup_fd = signal.set_wakeup_fd(write_fd, warn_on_full_buffer=False)

    def close(self) -> None:
        if self._wakeup is None:
            return
        signal.set_wakeup_fd(self._previous_wakeup_fd)
        signal.signal(signal.SIGCHLD, self._previous_sigchld)
        for fd in self._wakeup:
            os.close(fd)
        self._wakeup = None

    def spawn(self, spec: StageSpec, stdin: int | None = None, stdout: int | None = None) -> StageHandle:
        try:
            process = subprocess.Popen(
                list(spec.argv),
                executable=spec.executable,
                stdin=stdin,
                stdout=stdout,
                close_fds=True,
            )
        except OSError as e:
            raise PipelineError(
                f"Unable to execute {spec.name} program: {e}",
                context={"executable": spec.executable},
            ) from e

        self._processes[process.pid] = process
        return StageHandle(pid=process.pid, spec=spec, process=process)

    def wait_any(self) -> tuple[int, StageOutcome]:
        while True:
            if self._wakeup is None:
                pid, status = os.waitpid(-1, 0)
            else:
                pid, status = os.waitpid(-1, os.WNOHANG)
            if pid:
                process = self._processes.pop(pid, None)
                if process is not None:
                    # Keep Popen from waiting for a child that is gone
                    process.returncode = os.waitstatus_to_exitcode(status)
                return pid, StageOutcome.from_wait_status(status)
            if self._wait_for_signal():
                raise InterruptedError("Wait interrupted by a cancellation request")

    def _wait_for_signal(self) -> bool:
        """Block until a signal arrives; True if one of them was SIGTERM."""
        read_fd = self._wakeup[0]
        select.select([read_fd], [], [])
        try:
            received = os.read(read_fd, 512)
        except BlockingIOError:
            return False
        return signal.SIGTERM in received

    def terminate(self, handle: StageHandle) -> None:
        try:
            os.kill(handle.pid, signal.SIGTERM)
        except ProcessLookupError:
            logger.debug("PID %d (%s) is already gone", handle.pid, handle.name)
