"""
flakiness-report — ``report.json`` codec.

Purpose
- Decode and encode the single JSON document a report serializes to.
- Derive content-addressed attachment ids.

Functional requirements
- Decoding rejects invalid JSON and non-object roots with ``ReportDecodeError``.
- Encoding rejects non-finite numbers and non-JSON values with ``ReportEncodeError``.
- Encoding is canonical: sorted keys, compact separators, UTF-8.
- Decoding does not validate; pair with ``flakiness_report.schema.validate``.
"""

from __future__ import annotations

import hashlib
import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

PathLike = str | os.PathLike[str]


class ReportDecodeError(ValueError):
    """Raised when report text is not a JSON object."""


class ReportEncodeError(ValueError):
    """Raised when a report cannot be written as strict JSON."""


def loads_report(text: str | bytes) -> dict[str, Any]:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ReportDecodeError(f"invalid report JSON: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ReportDecodeError(f"report is not valid UTF-8: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ReportDecodeError(f"report root must be an object, got {type(parsed).__name__}")
    return parsed


def dumps_report(report: Mapping[str, Any]) -> str:
    # allow_nan=False keeps the output valid JSON for non-Python consumers.
    try:
        return json.dumps(
            report,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as exc:
        raise ReportEncodeError(f"report is not JSON-serializable: {exc}") from exc


def read_report(path: PathLike) -> dict[str, Any]:
    report_path = Path(path)
    try:
        raw = report_path.read_bytes()
    except OSError as exc:
        raise ReportDecodeError(f"unable to read report {report_path}: {exc}") from exc
    return loads_report(raw)


def write_report(path: PathLike, report: Mapping[str, Any]) -> Path:
    report_path = Path(path)
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(dumps_report(report), encoding="utf-8")
    return report_path


def attachment_id_for_bytes(data: bytes) -> str:
    """Return the SHA-256 hex digest used as a content-addressed attachment id."""

    return hashlib.sha256(data).hexdigest()


__all__ = [
    "ReportDecodeError",
    "ReportEncodeError",
    "attachment_id_for_bytes",
    "dumps_report",
    "loads_report",
    "read_report",
    "write_report",
]
