"""Reasoner boundary: prompt in, JSON object out.

The filtering engine and the workflows only depend on the ``Reasoner``
protocol. ``OpenAIReasoner`` is the production implementation over any
OpenAI-compatible chat completion endpoint.
"""

import asyncio
import json
from typing import Any, Protocol, runtime_checkable

from lmnr import Laminar
from openai import AsyncOpenAI

from pipeline_xray.exceptions import ReasonerError
from pipeline_xray.logging import get_pipeline_logger
from pipeline_xray.prompts import STRICT_JSON_SYSTEM_PROMPT
from pipeline_xray.settings import settings

logger = get_pipeline_logger(__name__)


@runtime_checkable
class Reasoner(Protocol):
    """Turns a natural-language prompt into a structured JSON object."""

    async def reason(self, prompt: str) -> dict[str, Any]:
        """Return the parsed JSON object.

        Raises:
            ReasonerError: If no usable object could be produced.
        """
        ...


def parse_json_object(content: str) -> dict[str, Any]:
    """Parse model output into a JSON object.

    Leading ``<think>`` sections and markdown code fences are stripped.

    Raises:
        ValueError: If the content is not a JSON object.
    """
    if "</think>" in content:
        content = content.split("</think>")[-1]
    content = content.strip()
    if content.startswith("```"):
        content = content.strip("`").removeprefix("json").strip()
    if not content:
        raise ValueError("Empty response content")
    parsed = json.loads(content)
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


class OpenAIReasoner:
    """Reasoner backed by an OpenAI-compatible chat completion API.

    Each attempt opens its own client and Laminar LLM span. Transport and
    parse failures are retried; after the last attempt a ReasonerError is
    raised from the final cause.
    """

    def __init__(
        self,
        model: str | None = None,
        *,
        retries: int | None = None,
        retry_delay_seconds: float | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        purpose: str = "reasoner",
    ) -> None:
        self.model = model or settings.reasoner_model
        self.retries = retries if retries is not None else settings.reasoner_retries
        self.retry_delay_seconds = retry_delay_seconds if retry_delay_seconds is not None else settings.reasoner_retry_delay_seconds
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.base_url = base_url if base_url is not None else settings.openai_base_url
        self.purpose = purpose
        if self.retries < 1:
            raise ValueError("retries must be at least 1")

    async def _complete(self, messages: list[dict[str, str]]) -> str:
        async with AsyncOpenAI(api_key=self.api_key, base_url=self.base_url or None) as client:
            with Laminar.start_as_current_span(self.purpose, span_type="LLM", input=messages):
                response = await client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    response_format={"type": "json_object"},
                )
                content = response.choices[0].message.content or ""
                Laminar.set_span_output(content)
                return content

    async def reason(self, prompt: str) -> dict[str, Any]:
        messages = [
            {"role": "system", "content": STRICT_JSON_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
        last_error: Exception | None = None
        for attempt in range(self.retries):
            try:
                return parse_json_object(await self._complete(messages))
            except Exception as e:
                last_error = e
                logger.warning(f"Reasoner call failed (attempt {attempt + 1}/{self.retries}): {e}")
            if attempt < self.retries - 1:
                await asyncio.sleep(self.retry_delay_seconds)
        raise ReasonerError(f"Reasoner failed after {self.retries} attempts") from last_error
