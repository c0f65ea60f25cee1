"""Tests for CatalogSearchWorkflow and workflow routing."""

from typing import Any

import pytest

from pipeline_xray.exceptions import ReasonerError
from pipeline_xray.registry import MemoryTraceRegistry
from pipeline_xray.testing import ScriptedReasoner
from pipeline_xray.tracing import ExecutionStatus, Tracer
from pipeline_xray.workflows import CatalogSearchWorkflow, Workflow, search_catalog, select_workflow

SCORES = {"Steel Water Bottle": 0.9, "Plastic Sports Bottle": 0.6, "Glass Water Bottle": 0.8}


def scripted_replies(keywords: list[str], rules: list[dict[str, Any]]):
    """Reply function routing each prompt kind to a canned answer."""

    def reply(prompt: str) -> dict[str, Any]:
        if "Extract key search terms" in prompt:
            return {"keywords": keywords, "reasoning": "bottle is the product"}
        if "decision engine" in prompt:
            return {"rules": rules, "reasoning": "cheap"}
        if "Rate relevance" in prompt:
            title = next(t for t in SCORES if t in prompt)
            return {"score": SCORES[title], "reasoning": f"{title} fits"}
        raise AssertionError(f"unexpected prompt: {prompt}")

    return reply


async def _run(workflow: CatalogSearchWorkflow, registry: MemoryTraceRegistry, request: str):
    tracer = Tracer(registry)
    execution_id = tracer.start_execution(request)
    await workflow.run(request, tracer)
    tracer.end_execution()
    stored = registry.get(execution_id)
    assert stored is not None
    return stored


class TestSearchCatalog:
    def test_matches_any_string_field(self, products):
        assert [p["title"] for p in search_catalog(products, ["GLASS"])] == ["Glass Water Bottle"]
        assert [p["title"] for p in search_catalog(products, ["sports"])] == ["Plastic Sports Bottle", "Trail Running Shoes"]

    def test_no_keywords_no_results(self, products):
        assert search_catalog(products, []) == []

    def test_matches_nested_and_list_strings(self):
        catalog = [{"title": "Post", "tags": ["python", "async"]}, {"title": "Other", "meta": {"topic": "rust"}}]
        assert search_catalog(catalog, ["async"]) == [catalog[0]]
        assert search_catalog(catalog, ["rust"]) == [catalog[1]]


class TestCatalogSearchWorkflow:
    @pytest.mark.asyncio
    async def test_full_pipeline(self, products, registry: MemoryTraceRegistry):
        reasoner = ScriptedReasoner(scripted_replies(["bottle"], [{"field": "price", "operator": "<", "value": 20}]))
        workflow = CatalogSearchWorkflow("Product Search", products, reasoner)

        execution = await _run(workflow, registry, "cheap bottle")

        assert execution.status == ExecutionStatus.COMPLETED
        assert [s.name for s in execution.steps] == [
            "Generate Search Keywords",
            "Search Database",
            "Apply Intelligent Filters",
            "Semantic Relevance Check",
            "Final Ranking",
        ]
        assert [s.type for s in execution.steps] == ["generation", "search", "apply_filter", "llm_relevance_evaluation", "ranking"]

        generation, search, filtering, relevance, ranking = execution.steps
        assert generation.output == {"keywords": ["bottle"]}
        assert generation.artifacts[0].data == {"derivedKeywords": "bottle"}

        assert search.artifacts[0].data == {"count": 3}
        assert search.evaluations[0].qualified is True
        assert search.evaluations[0].criteria_results[0].criterion == "Database Hit"

        assert [i["title"] for i in filtering.output["filteredItems"]] == ["Steel Water Bottle", "Plastic Sports Bottle"]
        assert {a.label for a in filtering.artifacts} == {"Candidate Evaluations", "Filter Logic"}

        assert relevance.artifacts[0].data == [
            {"title": "Steel Water Bottle", "score": 0.9},
            {"title": "Plastic Sports Bottle", "score": 0.6},
        ]
        top_pick = ranking.artifacts[0]
        assert top_pick.label == "Top Pick"
        assert top_pick.data["title"] == "Steel Water Bottle"
        assert [i["title"] for i in ranking.output["rankedItems"]] == ["Steel Water Bottle", "Plastic Sports Bottle"]

    @pytest.mark.asyncio
    async def test_stops_when_search_finds_nothing(self, products, registry: MemoryTraceRegistry):
        reasoner = ScriptedReasoner(scripted_replies(["teapot"], []))
        workflow = CatalogSearchWorkflow("Product Search", products, reasoner)

        execution = await _run(workflow, registry, "teapot")

        assert [s.name for s in execution.steps] == ["Generate Search Keywords", "Search Database"]
        evaluation = execution.steps[1].evaluations[0]
        assert evaluation.qualified is False
        assert reasoner.calls == 1

    @pytest.mark.asyncio
    async def test_stops_when_filter_keeps_nothing(self, products, registry: MemoryTraceRegistry):
        reasoner = ScriptedReasoner(scripted_replies(["bottle"], [{"field": "price", "operator": "<", "value": 1}]))
        workflow = CatalogSearchWorkflow("Product Search", products, reasoner)

        execution = await _run(workflow, registry, "free bottle")

        assert [s.name for s in execution.steps][-1] == "Apply Intelligent Filters"
        assert execution.steps[-1].output == {"filteredItems": []}
        assert execution.steps[-1].evaluations[0].qualified is False

    @pytest.mark.asyncio
    async def test_bad_keywords_reply_raises(self, products, registry: MemoryTraceRegistry):
        reasoner = ScriptedReasoner([{"keywords": "bottle", "reasoning": ""}])
        workflow = CatalogSearchWorkflow("Product Search", products, reasoner)
        tracer = Tracer(registry)
        tracer.start_execution("bottle")
        with pytest.raises(ReasonerError):
            await workflow.run("bottle", tracer)

    @pytest.mark.asyncio
    async def test_missing_score_raises(self, products, registry: MemoryTraceRegistry):
        reasoner = ScriptedReasoner(
            [
                {"keywords": ["steel"], "reasoning": ""},
                {"rules": [], "reasoning": ""},
                {"reasoning": "forgot the score"},
            ]
        )
        workflow = CatalogSearchWorkflow("Product Search", products, reasoner)
        tracer = Tracer(registry)
        tracer.start_execution("steel")
        with pytest.raises(ReasonerError, match="score"):
            await workflow.run("steel", tracer)


class TestSelectWorkflow:
    def _workflows(self, products) -> list[CatalogSearchWorkflow]:
        reasoner = ScriptedReasoner()
        blogs = CatalogSearchWorkflow("Blog Recommendation", [], reasoner, triggers=("blog", "article", "post"))
        shop = CatalogSearchWorkflow("Product Search", products, reasoner)
        return [blogs, shop]

    def test_trigger_match(self, products):
        assert select_workflow("Recommend an ARTICLE on asyncio", self._workflows(products)).name == "Blog Recommendation"

    def test_default_is_last(self, products):
        assert select_workflow("find a bottle", self._workflows(products)).name == "Product Search"

    def test_no_workflows(self):
        with pytest.raises(ValueError):
            select_workflow("anything", [])

    def test_satisfies_protocol(self, products):
        assert all(isinstance(w, Workflow) for w in self._workflows(products))
