"""Live feed over a TraceRegistry: snapshot first, then every update."""

import asyncio
from collections.abc import AsyncIterator

from pipeline_xray.logging import get_pipeline_logger
from pipeline_xray.tracing._models import Execution

from .protocol import TraceRegistry

logger = get_pipeline_logger(__name__)


def _progress(execution: Execution) -> tuple[int, int, bool]:
    # Every Tracer save leaves this equal or larger.
    return len(execution.steps), execution.status.rank, execution.ended_at is not None


async def watch(registry: TraceRegistry, execution_id: str) -> AsyncIterator[Execution]:
    """Yield the stored execution, then each saved update until it reaches a terminal status.

    The listener is registered before the snapshot is read, so no save between
    the two is lost. Saves queued before the snapshot was read can be older
    than it; an update that is behind or identical to the last yielded value
    is skipped. Saves may come from any thread and are handed to the
    consumer's loop with ``call_soon_threadsafe``. Unknown ids end the feed at
    once. The subscription is released however iteration ends.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[Execution] = asyncio.Queue()

    def _on_save(execution: Execution) -> None:
        try:
            loop.call_soon_threadsafe(queue.put_nowait, execution)
        except RuntimeError:
            logger.debug(f"Dropping update for execution {execution_id}: consumer loop is closed")

    registry.subscribe(execution_id, _on_save)
    try:
        current = registry.get(execution_id)
        if current is None:
            return
        yield current
        last = current
        while not last.status.is_terminal:
            update = await queue.get()
            if update == last or _progress(update) < _progress(last):
                continue
            yield update
            last = update
    finally:
        registry.unsubscribe(execution_id, _on_save)
