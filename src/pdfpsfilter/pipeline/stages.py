"""Pipeline stage descriptions, handles and outcomes."""

import os
import signal
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class StageRole(str, Enum):
    CONVERSION = "conversion"
    REWRITER = "rewriter"
    IMPOSITION = "imposition"


@dataclass(frozen=True)
class StageSpec:
    """How to start one pipeline stage.

    Attributes:
        executable: Program to execute
        argv: Argument vector; argv[0] is the name the program sees
        role: Position of the stage in the pipeline
        name: Label used in log messages
    """
    executable: str
    argv: tuple[str, ...]
    role: StageRole
    name: str


@dataclass
class StageHandle:
    """A started stage. `process` is whatever the supervisor needs to keep."""
    pid: int
    spec: StageSpec
    process: Any = field(default=None, repr=False)

    @property
    def name(self) -> str:
        return self.spec.name


class OutcomeKind(str, Enum):
    OK = "ok"  # exited with status 0
    FAILED = "failed"  # exited with a non-zero status
    TERMINATED = "terminated"  # killed by the cancellation signal
    CRASHED = "crashed"  # killed by any other signal


@dataclass(frozen=True)
class StageOutcome:
    """How a stage ended. `code` is the exit status or the signal number."""
    kind: OutcomeKind
    code: int = 0

    @classmethod
    def from_wait_status(cls, status: int) -> "StageOutcome":
        """Classify a raw status as returned by os.waitpid()."""
        if os.WIFSIGNALED(status):
            signum = os.WTERMSIG(status)
            if signum == signal.SIGTERM:
                return cls(OutcomeKind.TERMINATED, int(signum))
            return cls(OutcomeKind.CRASHED, int(signum))
        code = os.WEXITSTATUS(status) if os.WIFEXITED(status) else status
        if code == 0:
            return cls(OutcomeKind.OK)
        return cls(OutcomeKind.FAILED, code)
