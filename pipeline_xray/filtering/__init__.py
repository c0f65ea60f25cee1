"""Dynamic filtering: schema inference, declarative rules and the reasoner-driven engine."""

from ._values import JsonValue, flatten_paths, resolve_path, to_json, to_text
from ._rules import (
    FilterOperator,
    FilterReport,
    FilterRule,
    ItemEvaluation,
    RuleOutcome,
    apply_rules,
    evaluate_rule,
)
from ._schema import FieldSchema, describe_schema, infer_schema
from .engine import DynamicFilter, parse_rules

__all__ = [
    "DynamicFilter",
    "FieldSchema",
    "FilterOperator",
    "FilterReport",
    "FilterRule",
    "ItemEvaluation",
    "JsonValue",
    "RuleOutcome",
    "apply_rules",
    "describe_schema",
    "evaluate_rule",
    "flatten_paths",
    "infer_schema",
    "parse_rules",
    "resolve_path",
    "to_json",
    "to_text",
]
