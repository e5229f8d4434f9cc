"""
JSON export of normalized records.

Records are frozen dataclasses holding enums, dates, tuples and frozensets.
This module turns them into plain JSON data so the CLI (or any caller) can
print them or write them to a file.

- enums  -> their literal value ("1C", "CAMPUS", ...)
- dates  -> ISO strings
- sets   -> sorted lists, for a stable output
"""

from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any


def to_jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(to_jsonable(x) for x in value)
    if isinstance(value, (list, tuple)):
        return [to_jsonable(x) for x in value]
    return value


def records_to_json(records: Any) -> str:
    return json.dumps(to_jsonable(records), indent=2, ensure_ascii=False)


def save_records(records: Any, path: str | Path) -> Path:
    """
    Write records as JSON, creating parent directories if needed.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(records_to_json(records), encoding="utf-8")
    return out
