"""Trace registry protocol.

Defines the TraceRegistry protocol that registry backends implement. A
registry is injected explicitly into every Tracer and service; there is no
process-global instance.
"""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from pipeline_xray.tracing._models import Execution

type ExecutionListener = Callable[[Execution], None]
"""Callback invoked with the stored snapshot on every save of a subscribed execution."""


@runtime_checkable
class TraceRegistry(Protocol):
    """Keyed store of executions with a per-execution publish/subscribe channel.

    Implementations: MemoryTraceRegistry.
    """

    def save(self, execution: Execution) -> None:
        """Upsert by execution id (whole-value replace) and notify that id's listeners.

        The saved value is visible to get()/list() as soon as save() returns.
        Listeners registered before save() begins receive the update exactly once.
        """
        ...

    def list(self) -> list[Execution]:
        """Snapshot of every stored execution."""
        ...

    def get(self, execution_id: str) -> Execution | None:
        """Stored execution, or None when the id is unknown."""
        ...

    def subscribe(self, execution_id: str, listener: ExecutionListener) -> None:
        """Register a listener for future saves of one execution. Past saves are not replayed."""
        ...

    def unsubscribe(self, execution_id: str, listener: ExecutionListener) -> None:
        """Remove a listener. No-op if it was not registered."""
        ...
