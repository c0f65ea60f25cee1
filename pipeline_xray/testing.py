"""Test utilities for code built on pipeline-xray.

``ScriptedReasoner`` replaces a live model with deterministic replies so
workflows and the filtering engine can be exercised offline.
"""

import inspect
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

type ScriptedReply = dict[str, Any] | BaseException
type ReplyFunction = Callable[[str], dict[str, Any] | Awaitable[dict[str, Any]]]


class ScriptedReasoner:
    """Reasoner that answers from a queue of replies or from a function.

    Queued exceptions are raised instead of returned. Every prompt is kept in
    ``prompts`` in call order.

    Example:
        >>> reasoner = ScriptedReasoner([{"keywords": ["bottle"], "reasoning": "..."}])
        >>> reasoner = ScriptedReasoner(lambda prompt: {"score": 0.9, "reasoning": "ok"})
    """

    def __init__(self, replies: Iterable[ScriptedReply] | ReplyFunction = ()) -> None:
        self.prompts: list[str] = []
        self._function: ReplyFunction | None = None
        self._replies: deque[ScriptedReply] = deque()
        if callable(replies):
            self._function = replies
        else:
            self._replies.extend(replies)

    @property
    def calls(self) -> int:
        return len(self.prompts)

    @property
    def remaining(self) -> int:
        """Queued replies not yet consumed."""
        return len(self._replies)

    def queue(self, *replies: ScriptedReply) -> None:
        self._replies.extend(replies)

    async def reason(self, prompt: str) -> dict[str, Any]:
        self.prompts.append(prompt)
        if self._function is not None:
            result = self._function(prompt)
            if inspect.isawaitable(result):
                result = await result
            return result
        if not self._replies:
            raise AssertionError(f"ScriptedReasoner has no reply left for prompt #{len(self.prompts)}")
        reply = self._replies.popleft()
        if isinstance(reply, BaseException):
            raise reply
        return dict(reply)


__all__ = ["ScriptedReasoner"]
