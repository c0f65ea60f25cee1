"""Field schema inference over heterogeneous records."""

from collections.abc import Mapping, Sequence
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from ._values import flatten_paths, is_number, resolve_path, to_text

type FieldKind = Literal["number", "string", "boolean", "array", "null", "object"]

ENUM_THRESHOLD = 10
"""Strings with fewer distinct values than this are reported as an enum."""

EXAMPLE_COUNT = 3


class FieldSchema(BaseModel):
    """Inferred description of one dot-path.

    Numbers carry ``minimum``/``maximum``; strings carry either ``enum`` (all
    distinct values, first-seen order) or ``examples``; other kinds carry
    only their type tag.
    """

    model_config = ConfigDict(frozen=True)

    kind: FieldKind
    minimum: float | None = None
    maximum: float | None = None
    enum: tuple[str, ...] | None = None
    examples: tuple[str, ...] | None = None

    def describe(self) -> str:
        """Prompt and audit rendering, e.g. ``number (min: 10, max: 50)``."""
        if self.kind == "number":
            return f"number (min: {to_text(self.minimum)}, max: {to_text(self.maximum)})"
        if self.kind == "string" and self.enum is not None:
            return f"string (enum: {', '.join(self.enum)})"
        if self.kind == "string" and self.examples is not None:
            return f"string (examples: {', '.join(self.examples)})"
        return self.kind


def _kind_of(value: Any) -> FieldKind:
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    if isinstance(value, (list, tuple)):
        return "array"
    return "object"


def _infer_field(values: list[Any]) -> FieldSchema:
    kind = _kind_of(values[0])
    if kind == "number":
        numbers = [v for v in values if is_number(v)]
        return FieldSchema(kind="number", minimum=min(numbers), maximum=max(numbers))
    if kind == "string":
        distinct = list(dict.fromkeys(v for v in values if isinstance(v, str)))
        if len(distinct) < ENUM_THRESHOLD:
            return FieldSchema(kind="string", enum=tuple(distinct))
        return FieldSchema(kind="string", examples=tuple(distinct[:EXAMPLE_COUNT]))
    return FieldSchema(kind=kind)


def infer_schema(items: Sequence[Any]) -> dict[str, FieldSchema]:
    """Infer a schema from the paths of the first record and the values of all records.

    The first mapping item is the record that fixes the paths; items that are
    not mappings contribute no values. Returns an empty schema when no item
    is a mapping.
    """
    records = [item for item in items if isinstance(item, Mapping)]
    if not records:
        return {}
    return {path: _infer_field([resolve_path(r, path) for r in records]) for path in flatten_paths(records[0])}


def describe_schema(schema: Mapping[str, FieldSchema]) -> dict[str, str]:
    """Path -> description map used in prompts and in the Filter Logic artifact."""
    return {path: field.describe() for path, field in schema.items()}
