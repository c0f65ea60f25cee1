"""In-memory trace registry.

Dict-based storage plus per-execution listener lists. All data is lost when
the process exits.
"""

from threading import Lock

from pipeline_xray.logging import get_pipeline_logger
from pipeline_xray.tracing._models import Execution

from .protocol import ExecutionListener

logger = get_pipeline_logger(__name__)


class MemoryTraceRegistry:
    """Thread-safe in-memory registry.

    The execution map and listener lists are protected by ``_lock``.
    Listeners run on the saving thread, outside the lock, in subscription order.
    Stored values are deep copies, so later mutations by a Tracer never leak in
    without a save, and callers of get()/list() cannot corrupt the store.
    """

    def __init__(self) -> None:
        self._executions: dict[str, Execution] = {}
        self._listeners: dict[str, list[ExecutionListener]] = {}
        self._lock = Lock()

    def save(self, execution: Execution) -> None:
        """Store a snapshot of the execution and publish it to current listeners."""
        snapshot = execution.model_copy(deep=True)
        with self._lock:
            self._executions[snapshot.execution_id] = snapshot
            listeners = tuple(self._listeners.get(snapshot.execution_id, ()))

        for listener in listeners:
            try:
                listener(snapshot.model_copy(deep=True))
            except Exception as e:
                logger.warning(f"Listener for execution {snapshot.execution_id} failed: {e}")

    def list(self) -> list[Execution]:
        """Snapshot of all executions in insertion order."""
        with self._lock:
            stored = list(self._executions.values())
        return [e.model_copy(deep=True) for e in stored]

    def get(self, execution_id: str) -> Execution | None:
        with self._lock:
            stored = self._executions.get(execution_id)
        return stored.model_copy(deep=True) if stored is not None else None

    def subscribe(self, execution_id: str, listener: ExecutionListener) -> None:
        with self._lock:
            self._listeners.setdefault(execution_id, []).append(listener)

    def unsubscribe(self, execution_id: str, listener: ExecutionListener) -> None:
        with self._lock:
            listeners = self._listeners.get(execution_id)
            if not listeners:
                return
            try:
                listeners.remove(listener)
            except ValueError:
                return
            if not listeners:
                del self._listeners[execution_id]

    def listener_count(self, execution_id: str) -> int:
        """Number of listeners currently subscribed to an execution."""
        with self._lock:
            return len(self._listeners.get(execution_id, ()))

    def clear(self) -> None:
        """Drop every stored execution and listener."""
        with self._lock:
            self._executions.clear()
            self._listeners.clear()
