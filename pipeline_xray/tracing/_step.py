"""StepRecorder: accumulates one step's artifacts, evaluations, output and reasoning."""

from collections.abc import Iterable, Mapping
from typing import Any

from pipeline_xray.exceptions import StepSealedError, UnknownArtifactError

from ._models import Artifact, CriterionResult, Evaluation, Step, new_id, now_ms

type CriterionInput = CriterionResult | Mapping[str, Any]
"""A CriterionResult or a plain ``{"criterion", "passed", "detail"}`` mapping."""


class StepRecorder:
    """Builds exactly one Step, then seals it.

    Nothing here persists: the owning Tracer saves the execution when the
    step is handed back through ``Tracer.end_step``.
    """

    def __init__(self, name: str, type: str, input: Any = None) -> None:
        self._step_id = new_id()
        self._name = str(name)
        self._type = str(type)
        self._input = input
        self._output: Any = None
        self._reasoning: str | None = None
        self._artifacts: list[Artifact] = []
        self._evaluations: list[Evaluation] = []
        self._started_at = now_ms()
        self._sealed: Step | None = None

    @property
    def step_id(self) -> str:
        return self._step_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> str:
        return self._type

    @property
    def artifacts(self) -> tuple[Artifact, ...]:
        return tuple(self._artifacts)

    @property
    def evaluations(self) -> tuple[Evaluation, ...]:
        return tuple(self._evaluations)

    @property
    def is_sealed(self) -> bool:
        return self._sealed is not None

    def _ensure_open(self, operation: str) -> None:
        if self._sealed is not None:
            raise StepSealedError(f"Cannot {operation} on sealed step '{self._name}' ({self._step_id})")

    def add_artifact(self, label: str, data: Any) -> str:
        """Record an intermediate value and return its artifact id."""
        self._ensure_open("add artifact")
        artifact = Artifact(label=str(label), data=data)
        self._artifacts.append(artifact)
        return artifact.artifact_id

    def evaluate_artifact(self, artifact_id: str, criteria_results: Iterable[CriterionInput]) -> Evaluation:
        """Record a judgment on an artifact added to this step.

        ``qualified`` is True iff every criterion passed (True for no criteria).

        Raises:
            UnknownArtifactError: If ``artifact_id`` was not added on this step.
        """
        self._ensure_open("evaluate artifact")
        if not any(a.artifact_id == artifact_id for a in self._artifacts):
            raise UnknownArtifactError(f"Artifact '{artifact_id}' was not added on step '{self._name}'")
        results = [c if isinstance(c, CriterionResult) else CriterionResult.model_validate(c) for c in criteria_results]
        evaluation = Evaluation.from_criteria(artifact_id, results)
        self._evaluations.append(evaluation)
        return evaluation

    def set_output(self, output: Any) -> None:
        self._ensure_open("set output")
        self._output = output

    def set_reasoning(self, reasoning: str) -> None:
        self._ensure_open("set reasoning")
        self._reasoning = reasoning

    def end(self) -> Step:
        """Seal the step: stamp the end time and return the immutable Step."""
        self._ensure_open("end")
        self._sealed = Step(
            step_id=self._step_id,
            name=self._name,
            type=self._type,
            input=self._input,
            output=self._output,
            reasoning=self._reasoning,
            artifacts=tuple(self._artifacts),
            evaluations=tuple(self._evaluations),
            started_at=self._started_at,
            ended_at=now_ms(),
        )
        return self._sealed
