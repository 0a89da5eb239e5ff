"""Wiring and starting of the stage pipeline."""

import os

from pdfpsfilter.exceptions import PipelineError
from pdfpsfilter.logging_config import get_logger
from pdfpsfilter.pipeline.reaper import CancellationFlag, PipelineResult, reap
from pdfpsfilter.pipeline.stages import StageHandle, StageSpec
from pdfpsfilter.pipeline.supervisor import StageSupervisor

logger = get_logger(__name__)


class PipelineOrchestrator:
    """Starts stages connected by pipes and supervises them to the end.

    Stage i reads the previous stage's output and writes into the next
    stage's input; the first stage inherits standard input and the last one
    standard output. All stages run concurrently.
    """

    def __init__(self, supervisor: StageSupervisor, cancel_flag: CancellationFlag):
        self.supervisor = supervisor
        self.cancel_flag = cancel_flag
        self._open_fds: set[int] = set()

    def _close(self, fd: int | None) -> None:
        if fd is not None and fd in self._open_fds:
            self._open_fds.discard(fd)
            os.close(fd)

    def _close_all(self) -> None:
        for fd in sorted(self._open_fds):
            self._close(fd)

    def _create_pipes(self, count: int) -> list[tuple[int, int]]:
        pipes = []
        for _ in range(count):
            try:
                read_fd, write_fd = os.pipe()
            except OSError as e:
                self._close_all()
                raise PipelineError(f"Unable to create pipe: {e}") from e
            self._open_fds.update((read_fd, write_fd))
            pipes.append((read_fd, write_fd))
        return pipes

    def spawn(self, specs: list[StageSpec]) -> list[StageHandle]:
        """Start all stages in order without waiting for any of them.

        The descriptors handed to a stage are closed in this process right
        after the stage is started, so each stage sees end-of-file as soon
        as its producer exits.

        Raises:
            PipelineError: If a pipe cannot be created or a stage cannot be
                started. `spawned` lists the stages already running.
        """
        pipes = self._create_pipes(len(specs) - 1)
        handles: list[StageHandle] = []

        for index, spec in enumerate(specs):
            stdin = pipes[index - 1][0] if index > 0 else None
            stdout = pipes[index][1] if index < len(specs) - 1 else None
            try:
                handle = self.supervisor.spawn(spec, stdin=stdin, stdout=stdout)
            except PipelineError as e:
                self._close_all()
                e.spawned = handles
                raise
            self._close(stdin)
            self._close(stdout)
            handles.append(handle)
            logger.debug("Started filter %s (PID %d)", spec.name, handle.pid)

        return handles

    def run(self, specs: list[StageSpec]) -> PipelineResult:
        """Start the pipeline and wait until every started stage has ended.

        A failure to start the pipeline yields exit status 1, after the
        stages already started have been reaped.
        """
        try:
            handles = self.spawn(specs)
        except PipelineError as e:
            logger.error("%s", e)
            result = reap(self.supervisor, e.spawned, self.cancel_flag)
            result.exit_status = 1
            return result

        return reap(self.supervisor, handles, self.cancel_flag)
