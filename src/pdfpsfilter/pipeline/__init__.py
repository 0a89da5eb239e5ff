"""Pipeline package for pdfpsfilter.

This package starts the filter stages as processes connected by pipes and
supervises them until they have all ended.

Usage:
    from pdfpsfilter.pipeline import CancellationFlag, PipelineOrchestrator, ProcessSupervisor

    flag = CancellationFlag()
    with cancellation_handler(flag), ProcessSupervisor() as supervisor:
        result = PipelineOrchestrator(supervisor, flag).run(specs)
"""

from pdfpsfilter.pipeline.mock import MockSupervisor
from pdfpsfilter.pipeline.orchestrator import PipelineOrchestrator
from pdfpsfilter.pipeline.reaper import CancellationFlag, PipelineResult, cancellation_handler, reap
from pdfpsfilter.pipeline.stages import OutcomeKind, StageHandle, StageOutcome, StageRole, StageSpec
from pdfpsfilter.pipeline.supervisor import ProcessSupervisor, StageSupervisor

__all__ = [
    "CancellationFlag",
    "MockSupervisor",
    "OutcomeKind",
    "PipelineOrchestrator",
    "PipelineResult",
    "ProcessSupervisor",
    "StageHandle",
    "StageOutcome",
    "StageRole",
    "StageSpec",
    "StageSupervisor",
    "cancellation_handler",
    "reap",
]
