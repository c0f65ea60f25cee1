"""Workflow protocol and request routing."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from pipeline_xray.tracing import Tracer


@runtime_checkable
class Workflow(Protocol):
    """A multi-step decision pipeline that records itself through a Tracer.

    ``run`` is called with an execution already open on the tracer. It may
    return early; failures propagate to the run boundary.
    """

    @property
    def name(self) -> str: ...

    def matches(self, request: str) -> bool:
        """True when this workflow should handle the request."""
        ...

    async def run(self, request: str, tracer: Tracer) -> None: ...


def keyword_match(request: str, triggers: Sequence[str]) -> bool:
    """Case-insensitive substring match of any trigger in the request."""
    text = request.lower()
    return any(t.lower() in text for t in triggers if t)


def select_workflow(request: str, workflows: Sequence[Workflow]) -> Workflow:
    """First workflow that matches the request, else the last one as the default.

    Raises:
        ValueError: If no workflows are configured.
    """
    if not workflows:
        raise ValueError("No workflows configured")
    for workflow in workflows:
        if workflow.matches(request):
            return workflow
    return workflows[-1]
