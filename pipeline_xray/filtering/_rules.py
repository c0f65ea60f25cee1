"""Filter rules: operators, single-rule evaluation and whole-set application."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from ._values import resolve_path, to_json, to_number, to_text


class FilterOperator(StrEnum):
    """Closed set of comparison operators a rule may use."""

    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    EQ = "=="
    NE = "!="
    CONTAINS = "contains"


class FilterRule(BaseModel):
    """Declarative predicate over one dot-path of a record."""

    model_config = ConfigDict(frozen=True)

    field: str
    operator: FilterOperator
    value: Any = None

    def detail(self, actual: Any) -> str:
        """Audit line such as ``price: 50 < 20``."""
        return f"{self.field}: {to_json(actual)} {self.operator} {to_json(self.value)}"


def evaluate_rule(actual: Any, operator: FilterOperator | str, target: Any) -> bool:
    """Apply one operator. An absent (None) value never passes.

    Ordering operators compare numerically and fail when either side is not
    numeric; ``==``/``!=`` compare case-insensitive textual forms;
    ``contains`` is a case-insensitive substring test on textual forms.
    """
    if actual is None:
        return False
    op = FilterOperator(operator)
    if op in (FilterOperator.GT, FilterOperator.LT, FilterOperator.GE, FilterOperator.LE):
        left, right = to_number(actual), to_number(target)
        if left is None or right is None:
            return False
        match op:
            case FilterOperator.GT:
                return left > right
            case FilterOperator.LT:
                return left < right
            case FilterOperator.GE:
                return left >= right
            case _:
                return left <= right
    left_text, right_text = to_text(actual).casefold(), to_text(target).casefold()
    match op:
        case FilterOperator.EQ:
            return left_text == right_text
        case FilterOperator.NE:
            return left_text != right_text
        case _:
            return right_text in left_text


@dataclass(frozen=True, slots=True)
class RuleOutcome:
    """Result of one rule against one item."""

    key: str
    rule: FilterRule
    actual: Any
    passed: bool
    detail: str


@dataclass(frozen=True, slots=True)
class ItemEvaluation:
    """Every rule outcome for one item. Qualified iff all outcomes passed."""

    item: Any
    outcomes: tuple[RuleOutcome, ...]

    @property
    def qualified(self) -> bool:
        return all(o.passed for o in self.outcomes)


@dataclass(frozen=True, slots=True)
class FilterReport:
    """Full audit of applying a rule set to a batch of items."""

    rules: tuple[FilterRule, ...]
    evaluations: tuple[ItemEvaluation, ...]

    @property
    def qualified(self) -> list[Any]:
        """Items that passed every rule, in input order."""
        return [e.item for e in self.evaluations if e.qualified]

    @property
    def dropped(self) -> int:
        return sum(1 for e in self.evaluations if not e.qualified)


def rule_keys(rules: Sequence[FilterRule]) -> list[str]:
    """Distinct display key per rule: the field, disambiguated when a field repeats."""
    keys: list[str] = []
    for rule in rules:
        key = rule.field
        if key in keys:
            key = f"{rule.field} ({rule.operator})"
        candidate, n = key, 2
        while candidate in keys:
            candidate = f"{key} #{n}"
            n += 1
        keys.append(candidate)
    return keys


def apply_rules(items: Iterable[Any], rules: Iterable[FilterRule]) -> FilterReport:
    """Evaluate every rule against every item, keeping each outcome.

    No rules means every item qualifies.
    """
    rule_list = tuple(rules)
    keys = rule_keys(rule_list)
    evaluations = []
    for item in items:
        outcomes = []
        for key, rule in zip(keys, rule_list, strict=True):
            actual = resolve_path(item, rule.field)
            outcomes.append(
                RuleOutcome(
                    key=key,
                    rule=rule,
                    actual=actual,
                    passed=evaluate_rule(actual, rule.operator, rule.value),
                    detail=rule.detail(actual),
                )
            )
        evaluations.append(ItemEvaluation(item=item, outcomes=tuple(outcomes)))
    return FilterReport(rules=rule_list, evaluations=tuple(evaluations))
