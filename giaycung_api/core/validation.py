"""
Validation and coercion helpers for values going into and coming out of sheet cells.
Write paths reject bad input with ValidationError; read paths never raise.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterable, List, Sequence, Union

from .errors import ValidationError

Number = Union[int, float]

_NON_NUMERIC = re.compile(r"[^\d.\-]")


def safe_trim(v: Any) -> str:
    if v is None:
        return ""
    return str(v).strip()


def to_number(v: Any, default: Number = 0) -> Number:
    """
    Coerce a loosely formatted amount ("50.000đ", " 12 ", 3.5) to a number.

    Everything except digits, '.' and '-' is stripped first. Integral values
    come back as int so they are written to the sheet without a trailing ".0".
    """
    if isinstance(v, bool):
        return default
    if isinstance(v, (int, float)):
        n = float(v)
    else:
        s = _NON_NUMERIC.sub("", safe_trim(v))
        if s in ("", "-", ".", "-."):
            return default
        try:
            n = float(s)
        except ValueError:
            return default
    if n != n or n in (float("inf"), float("-inf")):
        return default
    return int(n) if n.is_integer() else n


def is_flag_set(v: Any) -> bool:
    """Sheets-style boolean cell: 1/TRUE/YES/Y (case-insensitive)."""
    return safe_trim(v).upper() in ("1", "TRUE", "YES", "Y")


def require_fields(data: Dict[str, Any], names: Sequence[str]) -> None:
    """
    Raise ValidationError naming every required field that is empty.

    Raises:
        ValidationError: 400 if at least one field is missing
    """
    missing = [name for name in names if safe_trim(data.get(name)) == ""]
    if missing:
        raise ValidationError.missing(missing)


def validate_choice(field: str, value: Any, allowed: Iterable[str]) -> str:
    """Return the trimmed value if it is in `allowed`, otherwise raise."""
    allowed = list(allowed)
    s = safe_trim(value)
    if s not in allowed:
        raise ValidationError.invalid_choice(field, s, allowed)
    return s


def default_if_blank(value: Any, default: str) -> str:
    s = safe_trim(value)
    return s or default


def parse_json_list(raw: Any) -> List[Any]:
    """
    Parse a JSON array stored in a cell.
    Blank, malformed or non-array content yields [] instead of raising.
    """
    if isinstance(raw, list):
        return raw
    s = safe_trim(raw)
    if not s:
        return []
    try:
        parsed = json.loads(s)
    except (TypeError, ValueError):
        return []
    return parsed if isinstance(parsed, list) else []


def clean_string_list(raw: Any) -> List[str]:
    """images can arrive as a list or as JSON text; keep non-empty strings only."""
    items = parse_json_list(raw)
    return [safe_trim(x) for x in items if safe_trim(x)]
