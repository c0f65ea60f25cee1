"""Five-stage search, filter and rank pipeline over an in-memory record catalog."""

from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from pipeline_xray.constants import ArtifactLabel, Criterion, StepName
from pipeline_xray.exceptions import ReasonerError
from pipeline_xray.filtering import DynamicFilter
from pipeline_xray.filtering._values import to_number
from pipeline_xray.logging import get_pipeline_logger
from pipeline_xray.prompts import keyword_generation, relevance_evaluation
from pipeline_xray.reasoner import Reasoner
from pipeline_xray.tracing import StepType, Tracer

from .base import keyword_match

logger = get_pipeline_logger(__name__)


def _strings(value: Any) -> Iterator[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, Mapping):
        for v in value.values():
            yield from _strings(v)
    elif isinstance(value, (list, tuple)):
        for v in value:
            yield from _strings(v)


def search_catalog(catalog: Sequence[Mapping[str, Any]], keywords: Sequence[str]) -> list[Mapping[str, Any]]:
    """Records where any keyword occurs, case-insensitively, in any string field."""
    needles = [k.lower() for k in keywords if k]
    if not needles:
        return []
    results = []
    for record in catalog:
        text = " ".join(_strings(record)).lower()
        if any(n in text for n in needles):
            results.append(record)
    return results


class CatalogSearchWorkflow:
    """Keywords, search, dynamic filter, relevance scoring and ranking.

    Stops early, without fallback, when the search finds nothing or the
    filter keeps nothing. Every stage is recorded as one step.
    """

    def __init__(
        self,
        name: str,
        catalog: Sequence[Mapping[str, Any]],
        reasoner: Reasoner,
        triggers: Sequence[str] = (),
        title_field: str = "title",
    ) -> None:
        self._name = name
        self.catalog = list(catalog)
        self.reasoner = reasoner
        self.triggers = tuple(triggers)
        self.title_field = title_field
        self.filter = DynamicFilter(reasoner, title_fields=(title_field, "name"))

    @property
    def name(self) -> str:
        return self._name

    def matches(self, request: str) -> bool:
        return keyword_match(request, self.triggers)

    def _title(self, item: Mapping[str, Any]) -> str:
        return str(item.get(self.title_field) or item.get("name") or "Item")

    async def _generate_keywords(self, request: str, tracer: Tracer) -> list[str]:
        step = tracer.start_step(StepName.GENERATION, StepType.GENERATION, {"userInput": request})
        reply = await self.reasoner.reason(keyword_generation(request))
        keywords = reply.get("keywords") or []
        if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
            raise ReasonerError(f"Expected 'keywords' to be a list of strings, got {keywords!r}")
        step.add_artifact(ArtifactLabel.PROMPT_ANALYSIS, {"derivedKeywords": ", ".join(keywords)})
        step.set_reasoning(str(reply.get("reasoning") or ""))
        step.set_output({"keywords": keywords})
        tracer.end_step(step)
        return keywords

    def _search(self, keywords: list[str], tracer: Tracer) -> list[Mapping[str, Any]]:
        step = tracer.start_step(StepName.SEARCH, StepType.SEARCH, {"keywords": keywords})
        results = search_catalog(self.catalog, keywords)
        artifact_id = step.add_artifact(ArtifactLabel.RAW_SEARCH_RESULTS, {"count": len(results)})
        step.evaluate_artifact(
            artifact_id,
            [
                {
                    "criterion": Criterion.DATABASE_HIT,
                    "passed": bool(results),
                    "detail": f"Found {len(results)} items matching keywords.",
                }
            ],
        )
        step.set_output({"results": results})
        step.set_reasoning(f"Found {len(results)} items matching keywords.")
        tracer.end_step(step)
        return results

    async def _filter(self, request: str, items: list[Mapping[str, Any]], tracer: Tracer) -> list[Any]:
        step = tracer.start_step(StepName.FILTER, StepType.APPLY_FILTER, {"itemCount": len(items)})
        filtered = await self.filter.apply(step, items, request)
        step.set_output({"filteredItems": filtered})
        tracer.end_step(step)
        return filtered

    async def _score(self, request: str, items: list[Mapping[str, Any]], tracer: Tracer) -> list[dict[str, Any]]:
        step = tracer.start_step(StepName.RELEVANCE, StepType.LLM_RELEVANCE_EVALUATION, {"itemCount": len(items)})
        scored = []
        for item in items:
            reply = await self.reasoner.reason(relevance_evaluation(request, self._title(item), item))
            score = to_number(reply.get("score"))
            if score is None:
                raise ReasonerError(f"Relevance reply for '{self._title(item)}' has no numeric score: {reply!r}")
            scored.append({**item, "relevanceScore": score, "matchReasoning": str(reply.get("reasoning") or "")})
        step.add_artifact(ArtifactLabel.RELEVANCE_SCORES, [{"title": self._title(s), "score": s["relevanceScore"]} for s in scored])
        step.set_output({"scoredItems": scored})
        tracer.end_step(step)
        return scored

    def _rank(self, scored: list[dict[str, Any]], tracer: Tracer) -> list[dict[str, Any]]:
        step = tracer.start_step(StepName.RANKING, StepType.RANKING, {"strategy": "AI Relevance Score"})
        ranked = sorted(scored, key=lambda s: s["relevanceScore"], reverse=True)
        step.add_artifact(ArtifactLabel.TOP_PICK, ranked[0])
        step.set_output({"rankedItems": ranked})
        tracer.end_step(step)
        return ranked

    async def run(self, request: str, tracer: Tracer) -> None:
        logger.info(f"[{self.name}] running request: {request}")
        keywords = await self._generate_keywords(request, tracer)

        results = self._search(keywords, tracer)
        if not results:
            logger.info(f"[{self.name}] no catalog records matched {keywords}; stopping")
            return

        filtered = await self._filter(request, results, tracer)
        if not filtered:
            logger.info(f"[{self.name}] every candidate was filtered out; stopping")
            return

        scored = await self._score(request, filtered, tracer)
        ranked = self._rank(scored, tracer)
        logger.info(f"[{self.name}] top pick: {self._title(ranked[0])}")
