"""Execution tracing: trace model, step recorder and tracer.

Example:
    >>> from pipeline_xray.registry import MemoryTraceRegistry
    >>> from pipeline_xray.tracing import StepType, Tracer
    >>>
    >>> tracer = Tracer(MemoryTraceRegistry())
    >>> tracer.start_execution("find a bottle")
    >>> step = tracer.start_step("Search Database", StepType.SEARCH, {"keywords": ["bottle"]})
    >>> artifact_id = step.add_artifact("Raw Search Results", [{"title": "Steel Bottle"}])
    >>> step.evaluate_artifact(artifact_id, [{"criterion": "Database Hit", "passed": True}])
    >>> tracer.end_step(step)
    >>> tracer.end_execution()
"""

from ._models import (
    Artifact,
    CriterionResult,
    Evaluation,
    Execution,
    ExecutionStatus,
    Step,
    StepType,
)
from ._step import CriterionInput, StepRecorder
from ._tracer import Tracer

__all__ = [
    "Artifact",
    "CriterionInput",
    "CriterionResult",
    "Evaluation",
    "Execution",
    "ExecutionStatus",
    "Step",
    "StepRecorder",
    "StepType",
    "Tracer",
]
