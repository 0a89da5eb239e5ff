"""Mock stage supervisor for testing."""

import signal

from pdfpsfilter.exceptions import PipelineError
from pdfpsfilter.pipeline.stages import OutcomeKind, StageHandle, StageOutcome, StageSpec
from pdfpsfilter.pipeline.supervisor import StageSupervisor


class MockSupervisor(StageSupervisor):
    """Stage supervisor that starts nothing.

    Records spawn and terminate calls for verification in tests. Stages end
    in spawn order with the configured outcome (OK by default); a stage
    that was terminated ends as TERMINATED.

    Example:
        supervisor = MockSupervisor(outcomes={"pstops": StageOutcome(OutcomeKind.FAILED, 2)})
        handles = PipelineOrchestrator(supervisor, CancellationFlag()).spawn(specs)
        assert [call["spec"].name for call in supervisor.spawn_calls] == [...]
    """

    name = "mock"

    def __init__(
        self,
        outcomes: dict[str, StageOutcome] | None = None,
        fail_on_spawn: str | None = None,
        interruptions: int = 0,
        first_pid: int = 1000,
    ):
        """Initialize mock supervisor.

        Args:
            outcomes: Outcome per stage name
            fail_on_spawn: Name of a stage whose spawn raises PipelineError
            interruptions: Number of wait_any() calls raising InterruptedError
                before stages start to end
            first_pid: Process ID given to the first stage
        """
        self.outcomes = outcomes or {}
        self.fail_on_spawn = fail_on_spawn
        self.interruptions = interruptions
        self.spawn_calls: list[dict] = []
        self.terminated: list[int] = []
        self._next_pid = first_pid
        self._running: list[StageHandle] = []

    def spawn(self, spec: StageSpec, stdin: int | None = None, stdout: int | None = None) -> StageHandle:
        self.spawn_calls.append({"spec": spec, "stdin": stdin, "stdout": stdout})
        if spec.name == self.fail_on_spawn:
            raise PipelineError(f"Unable to execute {spec.name} program", context={"executable": spec.executable})

        handle = StageHandle(pid=self._next_pid, spec=spec)
        self._next_pid += 1
        self._running.append(handle)
        return handle

    def wait_any(self) -> tuple[int, StageOutcome]:
        if self.interruptions > 0:
            self.interruptions -= 1
            raise InterruptedError("Mock interruption")
        if not self._running:
            raise ChildProcessError("No child processes")

        handle = self._running.pop(0)
        if handle.pid in self.terminated:
            return handle.pid, StageOutcome(OutcomeKind.TERMINATED, int(signal.SIGTERM))
        return handle.pid, self.outcomes.get(handle.name, StageOutcome(OutcomeKind.OK))

    def terminate(self, handle: StageHandle) -> None:
        self.terminated.append(handle.pid)
