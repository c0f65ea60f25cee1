"""DynamicFilter: reasoner-generated, schema-checked filter rules with a full audit trail."""

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from pipeline_xray.constants import ArtifactLabel, Criterion
from pipeline_xray.exceptions import InvalidFilterRuleError
from pipeline_xray.logging import get_pipeline_logger
from pipeline_xray.prompts import dynamic_filter
from pipeline_xray.reasoner import Reasoner
from pipeline_xray.tracing import StepRecorder

from ._rules import FilterReport, FilterRule, ItemEvaluation, apply_rules
from ._schema import FieldSchema, describe_schema, infer_schema
from ._values import is_number

logger = get_pipeline_logger(__name__)

DEFAULT_TITLE_FIELDS = ("title", "name")


def parse_rules(reply: Mapping[str, Any], schema: Mapping[str, FieldSchema]) -> list[FilterRule]:
    """Validate the reasoner's ``rules`` list against the closed operator set and the schema.

    A missing ``rules`` key means no rules.

    Raises:
        InvalidFilterRuleError: If the list is malformed, uses an unknown
            operator, or references a field outside the schema.
    """
    raw_rules = reply.get("rules") or []
    if not isinstance(raw_rules, list):
        raise InvalidFilterRuleError(f"Expected 'rules' to be a list, got {type(raw_rules).__name__}")
    rules = []
    for raw in raw_rules:
        try:
            rule = FilterRule.model_validate(raw)
        except ValidationError as e:
            raise InvalidFilterRuleError(f"Malformed filter rule {raw!r}: {e}") from e
        if rule.field not in schema:
            raise InvalidFilterRuleError(f"Filter rule references unknown field '{rule.field}'; known fields: {', '.join(schema)}")
        rules.append(rule)
    return rules


class DynamicFilter:
    """Filters heterogeneous records with rules generated for a natural-language intent.

    The schema is inferred from the items, the reasoner picks rules over that
    schema, every rule is evaluated against every item, and the step receives
    the reasoning, a ``Candidate Evaluations`` artifact (per-item rule matrix)
    and a ``Filter Logic`` artifact judged by the ``Filter Applied`` criterion.
    """

    def __init__(self, reasoner: Reasoner, title_fields: Sequence[str] = DEFAULT_TITLE_FIELDS) -> None:
        self.reasoner = reasoner
        self.title_fields = tuple(title_fields)

    def _title(self, item: Any) -> str:
        if not isinstance(item, Mapping):
            return "Item"
        for name in self.title_fields:
            if value := item.get(name):
                return str(value)
        return "Item"

    def _candidate_row(self, evaluation: ItemEvaluation) -> dict[str, Any]:
        item = evaluation.item
        row: dict[str, Any] = {"item": self._title(item)}
        if isinstance(item, Mapping):
            row.update({k: v for k, v in item.items() if is_number(v)})
            if isinstance(metrics := item.get("metrics"), Mapping):
                row.update(metrics)
        for outcome in evaluation.outcomes:
            row.setdefault(outcome.key, outcome.actual)
        row["rules"] = {o.key: {"passed": o.passed, "detail": o.detail} for o in evaluation.outcomes}
        row["qualified"] = evaluation.qualified
        row["originalItem"] = item
        return row

    def _record(self, step: StepRecorder, report: FilterReport, schema: Mapping[str, FieldSchema]) -> None:
        step.add_artifact(ArtifactLabel.CANDIDATE_EVALUATIONS, [self._candidate_row(e) for e in report.evaluations])
        dropped = report.dropped
        logic_id = step.add_artifact(
            ArtifactLabel.FILTER_LOGIC,
            {
                "schema": describe_schema(schema),
                "generatedRules": [r.model_dump(mode="json") for r in report.rules],
                "dropped": dropped,
            },
        )
        step.evaluate_artifact(
            logic_id,
            [
                {
                    "criterion": Criterion.FILTER_APPLIED,
                    "passed": len(report.evaluations) > dropped,
                    "detail": f"Dropped {dropped} items based on dynamic rules." if dropped else "No items dropped.",
                }
            ],
        )

    async def apply(self, step: StepRecorder, items: Sequence[Any], intent: str) -> list[Any]:
        """Return the items that satisfy every generated rule, in input order.

        Empty input returns ``[]`` without consulting the reasoner or touching
        the step. Items that are not mappings resolve every field as absent,
        so any rule drops them. Reasoner failures and invalid rules propagate.
        """
        if not items:
            return []

        schema = infer_schema(items)
        reply = await self.reasoner.reason(dynamic_filter(intent, len(items), describe_schema(schema)))
        rules = parse_rules(reply, schema)
        step.set_reasoning(str(reply.get("reasoning") or ""))

        report = apply_rules(items, rules)
        self._record(step, report, schema)

        qualified = report.qualified
        logger.info(f"Dynamic filter kept {len(qualified)} of {len(items)} items with {len(rules)} rule(s)")
        return qualified
