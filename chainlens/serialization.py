"""JSON-safe conversion of arbitrary-precision integers."""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import BaseModel

INT_STRING_RE = re.compile(r"^-?[0-9]+$")


def stringify_ints(obj: Any) -> Any:
    """Recursively replace every int leaf (not bool) with its decimal string."""
    if isinstance(obj, BaseModel):
        obj = obj.model_dump()
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, int):
        return str(obj)
    if isinstance(obj, dict):
        return {k: stringify_ints(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [stringify_ints(v) for v in obj]
    return obj


def parse_int_strings(obj: Any) -> Any:
    """Inverse of ``stringify_ints``: decimal strings become ints again."""
    if isinstance(obj, str) and INT_STRING_RE.match(obj):
        return int(obj)
    if isinstance(obj, dict):
        return {k: parse_int_strings(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [parse_int_strings(v) for v in obj]
    return obj


def to_json(obj: Any) -> str:
    return json.dumps(stringify_ints(obj))
