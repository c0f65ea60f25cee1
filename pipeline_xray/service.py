"""XRayService: transport-agnostic query and dispatch surface over a registry and workflows."""

import asyncio
from collections.abc import AsyncIterator, Sequence
from typing import Any

from pipeline_xray.exceptions import TracingError
from pipeline_xray.logging import get_pipeline_logger
from pipeline_xray.registry import TraceRegistry, watch
from pipeline_xray.runtime import RunSupervisor, run_traced
from pipeline_xray.tracing import Execution, Tracer
from pipeline_xray.workflows import Workflow, select_workflow

logger = get_pipeline_logger(__name__)


class XRayService:
    """Starts traced workflow runs and answers execution queries.

    A run is detached: ``start`` hands back the execution id as soon as the
    execution is persisted, while the workflow continues on the supervisor.
    """

    def __init__(
        self,
        registry: TraceRegistry,
        workflows: Sequence[Workflow],
        supervisor: RunSupervisor | None = None,
    ) -> None:
        if not workflows:
            raise ValueError("XRayService needs at least one workflow")
        self.registry = registry
        self.workflows = tuple(workflows)
        self.supervisor = supervisor or RunSupervisor()

    def list_executions(self) -> list[Execution]:
        return self.registry.list()

    def get_execution(self, execution_id: str) -> Execution | None:
        return self.registry.get(execution_id)

    def watch(self, execution_id: str) -> AsyncIterator[Execution]:
        """Live feed of one execution: current snapshot, then updates until terminal."""
        return watch(self.registry, execution_id)

    def _launch(self, request: str) -> tuple[str, "asyncio.Task[Any]"]:
        workflow = select_workflow(request, self.workflows)
        tracer = Tracer(self.registry)
        execution_id = tracer.start_execution(request, {"originalRequest": request, "workflow": workflow.name})
        logger.info(f"Dispatching execution {execution_id} to workflow '{workflow.name}'")

        async def body() -> None:
            await workflow.run(request, tracer)

        task = self.supervisor.spawn(run_traced(tracer, body), name=f"xray-run-{execution_id}")
        return execution_id, task

    async def start(self, request: str) -> str:
        """Open an execution for the request and run its workflow in the background."""
        execution_id, _ = self._launch(request)
        return execution_id

    async def run(self, request: str) -> Execution:
        """Run the request to completion and return the terminal execution."""
        execution_id, task = self._launch(request)
        execution = await task
        if execution is None:
            # The workflow closed the execution itself; report the stored copy.
            execution = self.registry.get(execution_id)
        if execution is None:
            raise TracingError(f"Execution {execution_id} is missing from the registry after its run")
        return execution

    async def aclose(self) -> None:
        """Wait for every outstanding run to finish."""
        await self.supervisor.drain()
