"""Primitive shape and bounds checks.

Every check writes failures into an ``IssueCollector`` and returns the parsed
value, or ``None`` when the value was rejected. Checks never raise.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping

from flakiness_report.schema.issues import IssueCollector


def join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def index(path: str, position: int) -> str:
    return f"{path}[{position}]"


def as_object(value: object, path: str, issues: IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {_type_name(value)}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {_type_name(key)}")
            continue
        out[key] = item
    return out


def as_array(value: object, path: str, issues: IssueCollector) -> list[object] | None:
    if isinstance(value, (list, tuple)):
        return list(value)
    issues.add(path, f"expected array, got {_type_name(value)}")
    return None


def as_str(
    value: object,
    path: str,
    issues: IssueCollector,
    *,
    min_len: int = 0,
    max_len: int | None = None,
) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {_type_name(value)}")
        return None
    if min_len == max_len and len(value) != min_len:
        issues.add(path, f"must be exactly {min_len} characters, got {len(value)}")
        return None
    if len(value) < min_len:
        issues.add(path, f"must be at least {min_len} character(s)")
        return None
    if max_len is not None and len(value) > max_len:
        issues.add(path, f"must be at most {max_len} characters")
        return None
    return value


def as_bool(value: object, path: str, issues: IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {_type_name(value)}")
    return None


def as_number(
    value: object,
    path: str,
    issues: IssueCollector,
    *,
    minimum: float | None = None,
    maximum: float | None = None,
) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        issues.add(path, f"expected number, got {_type_name(value)}")
        return None
    if isinstance(value, float) and not math.isfinite(value):
        issues.add(path, "must be finite")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {_render_bound(minimum)}")
        return None
    if maximum is not None and value > maximum:
        issues.add(path, f"must be <= {_render_bound(maximum)}")
        return None
    return value


def as_int(
    value: object,
    path: str,
    issues: IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {_type_name(value)}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def as_enum(
    value: object,
    path: str,
    issues: IssueCollector,
    *,
    allowed_values: tuple[str, ...],
    normalize: Callable[[str], str] | None = None,
) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {_type_name(value)}")
        return None
    parsed = value if normalize is None else normalize(value)
    if parsed not in allowed_values:
        expected = ", ".join(repr(item) for item in allowed_values)
        issues.add(path, f"invalid value {value!r}; expected one of: {expected}")
        return None
    return parsed


def as_scalar_map(
    value: object,
    path: str,
    issues: IssueCollector,
) -> dict[str, str | bool | float] | None:
    payload = as_object(value, path, issues)
    if payload is None:
        return None
    out: dict[str, str | bool | float] = {}
    for key in payload:
        item = payload[key]
        if isinstance(item, (str, bool)):
            out[key] = item
        elif isinstance(item, int) or (isinstance(item, float) and math.isfinite(item)):
            out[key] = item
        else:
            issues.add(
                join(path, key),
                f"expected string, boolean or number, got {_type_name(item)}",
            )
    return out


def require_keys(
    payload: Mapping[str, object],
    required: frozenset[str],
    path: str,
    issues: IssueCollector,
) -> None:
    for key in sorted(required):
        if key not in payload:
            issues.add(join(path, key), "missing required field")


def reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: frozenset[str],
    path: str,
    issues: IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(join(path, key), "unknown field")


def _type_name(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _render_bound(bound: float) -> str:
    if float(bound).is_integer():
        return str(int(bound))
    return str(bound)


__all__ = [
    "as_array",
    "as_bool",
    "as_enum",
    "as_int",
    "as_number",
    "as_object",
    "as_scalar_map",
    "as_str",
    "index",
    "join",
    "reject_unknown_keys",
    "require_keys",
]
