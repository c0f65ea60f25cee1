"""Trace data model: Execution, Step, Artifact, Evaluation, CriterionResult.

Attribute names are snake_case; serialization uses the camelCase wire keys
consumed by the dashboard (``executionId``, ``startedAt``, ``criteriaResults``...).
Optional keys holding None are left out of the serialized form.
"""

import time
import uuid
from enum import StrEnum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer, model_validator
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    """Current wall-clock time in integer milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def new_id() -> str:
    """Fresh unique identifier for executions, steps and artifacts."""
    return str(uuid.uuid4())


class ExecutionStatus(StrEnum):
    """Lifecycle status of an execution.

    Ordered: PENDING -> RUNNING -> (COMPLETED | FAILED). FAILED is sticky.
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]

    @property
    def is_terminal(self) -> bool:
        return self in (ExecutionStatus.COMPLETED, ExecutionStatus.FAILED)


_STATUS_RANK = {
    ExecutionStatus.PENDING: 0,
    ExecutionStatus.RUNNING: 1,
    ExecutionStatus.COMPLETED: 2,
    ExecutionStatus.FAILED: 2,
}


class StepType:
    """Common step type tags. Step.type is an open string; these are conventions only."""

    GENERATION = "generation"
    SEARCH = "search"
    APPLY_FILTER = "apply_filter"
    LLM_RELEVANCE_EVALUATION = "llm_relevance_evaluation"
    RANKING = "ranking"
    CUSTOM = "custom"


class _TraceModel(BaseModel):
    """Shared config: camelCase aliases on the wire, optional None keys omitted."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        validate_by_name=True,
        validate_by_alias=True,
        serialize_by_alias=True,
    )

    omit_when_none: ClassVar[frozenset[str]] = frozenset()

    @model_serializer(mode="wrap")
    def _drop_empty_optionals(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for name in self.omit_when_none:
            for key in (name, to_camel(name)):
                if key in data and data[key] is None:
                    del data[key]
        return data


class CriterionResult(_TraceModel):
    """The atomic "why" of an evaluation: one named check and its outcome."""

    model_config = ConfigDict(frozen=True)

    criterion: str
    passed: bool
    detail: str = ""


class Evaluation(_TraceModel):
    """Pass/fail judgment on one artifact.

    ``qualified`` is the AND over every criterion; no criteria means qualified.
    """

    model_config = ConfigDict(frozen=True)

    artifact_id: str
    qualified: bool
    criteria_results: tuple[CriterionResult, ...] = ()

    @model_validator(mode="after")
    def _verdict_matches_criteria(self) -> "Evaluation":
        expected = all(c.passed for c in self.criteria_results)
        if self.qualified != expected:
            raise ValueError(f"qualified={self.qualified} contradicts criteria results (expected {expected})")
        return self

    @classmethod
    def from_criteria(cls, artifact_id: str, criteria_results: "list[CriterionResult] | tuple[CriterionResult, ...]") -> "Evaluation":
        results = tuple(criteria_results)
        return cls(artifact_id=artifact_id, qualified=all(c.passed for c in results), criteria_results=results)


class Artifact(_TraceModel):
    """Labeled, opaque intermediate value attached to a step."""

    model_config = ConfigDict(frozen=True)

    artifact_id: str = Field(default_factory=new_id)
    label: str
    data: Any = None


class Step(_TraceModel):
    """One sealed pipeline stage. Immutable once produced by StepRecorder.end()."""

    model_config = ConfigDict(frozen=True)
    omit_when_none: ClassVar[frozenset[str]] = frozenset({"output", "reasoning", "ended_at"})

    step_id: str = Field(default_factory=new_id)
    name: str
    type: str
    input: Any = None
    output: Any = None
    reasoning: str | None = None
    artifacts: tuple[Artifact, ...] = ()
    evaluations: tuple[Evaluation, ...] = ()
    started_at: int = Field(default_factory=now_ms)
    ended_at: int | None = None


class Execution(_TraceModel):
    """One recorded pipeline run.

    Mutated only by the Tracer that opened it; the registry keeps deep copies.
    """

    omit_when_none: ClassVar[frozenset[str]] = frozenset({"metadata", "ended_at"})

    execution_id: str = Field(default_factory=new_id)
    name: str
    metadata: dict[str, Any] | None = None
    steps: list[Step] = Field(default_factory=list)
    started_at: int = Field(default_factory=now_ms)
    ended_at: int | None = None
    status: ExecutionStatus = ExecutionStatus.PENDING

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible dict in the dashboard wire format."""
        return self.model_dump(mode="json")


__all__ = [
    "Artifact",
    "CriterionResult",
    "Evaluation",
    "Execution",
    "ExecutionStatus",
    "Step",
    "StepType",
    "new_id",
    "now_ms",
]
