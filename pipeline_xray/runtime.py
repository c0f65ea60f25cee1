"""Run supervision: detached run tasks and the traced run boundary."""

import asyncio
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any

from pipeline_xray.constants import ArtifactLabel, Criterion, StepName
from pipeline_xray.logging import get_pipeline_logger
from pipeline_xray.tracing import Execution, StepType, Tracer

logger = get_pipeline_logger(__name__)


def _record_failure(tracer: Tracer, error: Exception) -> None:
    message = str(error) or type(error).__name__
    step = tracer.start_step(StepName.FAILURE, StepType.CUSTOM, {"error": message})
    artifact_id = step.add_artifact(ArtifactLabel.ERROR_DETAILS, {"error": message, "type": type(error).__name__})
    step.evaluate_artifact(artifact_id, [{"criterion": Criterion.EXECUTION_SUCCESS, "passed": False, "detail": message}])
    tracer.end_step(step)


async def run_traced(tracer: Tracer, body: Callable[[], Awaitable[Any]]) -> Execution | None:
    """Run ``body`` against the tracer's open execution and always close it.

    Success completes the execution. An exception is recorded as an
    ``Execution Failed`` step carrying an ``Error Details`` artifact, then the
    execution is failed; the exception is not re-raised. Cancellation and
    other interrupts fail the execution and propagate. The terminal state is
    saved exactly once, on every path.

    Returns:
        The closed Execution, or None if nothing was open.
    """
    failure: str | None = None
    try:
        await body()
    except Exception as e:
        logger.error(f"Execution {tracer.execution_id} failed: {e}", exc_info=True)
        failure = str(e) or type(e).__name__
        if tracer.execution is not None:
            _record_failure(tracer, e)
    except asyncio.CancelledError:
        failure = "Run cancelled"
        raise
    except BaseException as e:
        failure = f"Run interrupted by {type(e).__name__}"
        raise
    finally:
        execution = tracer.end_execution(failure_reason=failure)
    return execution


class RunSupervisor:
    """Owns detached run tasks until they finish.

    Strong references keep tasks alive; exceptions escaping a run are logged
    when the task completes.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def active(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> asyncio.Task[Any]:
        """Schedule a coroutine on the running loop and track it."""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug(f"Run task {task.get_name()} cancelled")
            return
        if (error := task.exception()) is not None:
            logger.error(f"Run task {task.get_name()} raised: {error}", exc_info=error)

    async def drain(self) -> None:
        """Wait until every tracked run has finished, including runs spawned while waiting."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        """Cancel every tracked run and wait for them to unwind."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
