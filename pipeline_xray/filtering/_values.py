"""JSON-like record helpers: dot-path lookup, path flattening and value rendering."""

import json
import math
from collections.abc import Iterator, Mapping
from typing import Any

type JsonValue = None | bool | int | float | str | list["JsonValue"] | dict[str, "JsonValue"]
"""Heterogeneous record content: JSON scalars, arrays and objects."""


def resolve_path(record: Any, path: str) -> Any:
    """Value at a dot-separated path, or None.

    Only mappings are walked; a missing key or a non-mapping intermediate
    resolves to None.
    """
    current = record
    for segment in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(segment)
        if current is None:
            return None
    return current


def flatten_paths(record: Mapping[str, Any], prefix: str = "") -> Iterator[str]:
    """Yield dot-paths of a record's leaves. Recurses into mappings, never into lists."""
    for key, value in record.items():
        path = f"{prefix}{key}"
        if isinstance(value, Mapping):
            yield from flatten_paths(value, f"{path}.")
        else:
            yield path


def is_number(value: Any) -> bool:
    """True for int and float values, excluding bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_number(value: Any) -> float | None:
    """Numeric reading of a value: numbers as-is, numeric strings parsed, anything else None."""
    if is_number(value):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) else number


def _normalize(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, Mapping):
        return {k: _normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return value


def to_json(value: Any) -> str:
    """Compact JSON encoding with integral floats written as integers (``50.0`` -> ``50``)."""
    return json.dumps(_normalize(value), separators=(",", ":"), ensure_ascii=False, default=str)


def to_text(value: Any) -> str:
    """Textual form used by equality and containment rules.

    Booleans render as ``true``/``false``, None as ``null``, integral floats
    without a fractional part, containers as compact JSON.
    """
    if isinstance(value, str):
        return value
    if value is None or isinstance(value, (bool, Mapping, list, tuple)):
        return to_json(value)
    if is_number(value):
        return str(_normalize(value))
    return str(value)
