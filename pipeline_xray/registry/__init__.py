"""Trace registry: shared store of executions with per-execution live updates."""

from ._feed import watch
from .memory import MemoryTraceRegistry
from .protocol import ExecutionListener, TraceRegistry

__all__ = [
    "ExecutionListener",
    "MemoryTraceRegistry",
    "TraceRegistry",
    "watch",
]
