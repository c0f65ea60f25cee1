"""Tracer: per-run handle that owns one open Execution and persists it."""

from typing import TYPE_CHECKING, Any

from pipeline_xray.exceptions import NoActiveExecutionError
from pipeline_xray.logging import get_pipeline_logger

from ._models import Execution, ExecutionStatus, Step, now_ms
from ._step import StepRecorder

if TYPE_CHECKING:
    from pipeline_xray.registry.protocol import TraceRegistry

logger = get_pipeline_logger(__name__)


class Tracer:
    """Records one pipeline run into a TraceRegistry.

    Single writer: every mutation of the held Execution goes through this
    object, and each mutation that matters to observers ends in a save.
    A Tracer is not shared between concurrent runs.
    """

    def __init__(self, registry: "TraceRegistry") -> None:
        self._registry = registry
        self._execution: Execution | None = None

    @property
    def registry(self) -> "TraceRegistry":
        return self._registry

    @property
    def execution(self) -> Execution | None:
        """The in-progress Execution, or None between runs."""
        return self._execution

    @property
    def execution_id(self) -> str | None:
        return self._execution.execution_id if self._execution is not None else None

    def get_execution_id(self) -> str | None:
        return self.execution_id

    def start_execution(self, name: str, metadata: dict[str, Any] | None = None) -> str:
        """Open a fresh pending Execution, persist it and return its id."""
        if self._execution is not None:
            logger.warning(
                f"Starting execution '{name}' while execution {self._execution.execution_id} "
                f"is still open; the open execution is abandoned"
            )
        self._execution = Execution(name=name, metadata=dict(metadata) if metadata is not None else None)
        self._registry.save(self._execution)
        logger.debug(f"Started execution {self._execution.execution_id} ({name})")
        return self._execution.execution_id

    def _require_execution(self, operation: str) -> Execution:
        if self._execution is None:
            raise NoActiveExecutionError(operation)
        return self._execution

    def start_step(self, name: str, type: str, input: Any = None) -> StepRecorder:
        """Begin a step. The first step moves the execution from pending to running."""
        execution = self._require_execution("start_step")
        if execution.status == ExecutionStatus.PENDING:
            execution.status = ExecutionStatus.RUNNING
            self._registry.save(execution)
        return StepRecorder(name, type, input)

    def end_step(self, recorder: StepRecorder) -> Step:
        """Seal the recorder, append the step and persist the execution."""
        execution = self._require_execution("end_step")
        step = recorder.end()
        execution.steps.append(step)
        self._registry.save(execution)
        return step

    def set_status(self, status: ExecutionStatus | str) -> None:
        """Override the status, refusing moves backwards or away from failed."""
        execution = self._execution
        if execution is None:
            return
        status = ExecutionStatus(status)
        current = execution.status
        if current == ExecutionStatus.FAILED and status != ExecutionStatus.FAILED:
            logger.warning(f"Execution {execution.execution_id} already failed; ignoring status '{status}'")
            return
        if status.rank < current.rank:
            logger.warning(f"Execution {execution.execution_id}: refusing status change '{current}' -> '{status}'")
            return
        execution.status = status
        self._registry.save(execution)

    def _mark_failed(self, execution: Execution, reason: str) -> None:
        execution.metadata = {**(execution.metadata or {}), "failureReason": reason}
        execution.status = ExecutionStatus.FAILED
        logger.warning(f"Execution {execution.execution_id} failed: {reason}")

    def fail_execution(self, reason: str) -> None:
        """Mark the open execution failed and keep the reason in its metadata."""
        execution = self._execution
        if execution is None:
            logger.warning(f"fail_execution called without an open execution: {reason}")
            return
        self._mark_failed(execution, reason)
        self._registry.save(execution)

    def end_execution(self, failure_reason: str | None = None) -> Execution | None:
        """Close the open execution, persist the terminal state and release it.

        With ``failure_reason`` the execution is failed as part of the same
        save, so observers see a single terminal update that carries the end
        timestamp.
        """
        execution = self._execution
        if execution is None:
            return None
        if failure_reason is not None:
            self._mark_failed(execution, failure_reason)
        execution.ended_at = now_ms()
        if execution.status != ExecutionStatus.FAILED:
            execution.status = ExecutionStatus.COMPLETED
        self._registry.save(execution)
        self._execution = None
        logger.debug(f"Ended execution {execution.execution_id} with status '{execution.status}'")
        return execution
