"""
core/coerce.py — Numeric coercion for raw cell values.

to_number never raises. Anything without an extractable number is 0:
  - int/float are returned unchanged (booleans are not numbers here)
  - everything else is stringified, stripped down to digits, '.' and '-',
    and the longest leading float prefix is parsed ("$1,234.50" -> 1234.5,
    "12 pcs" -> 12, "1.2.3" -> 1.2, "-" -> 0)
"""
from __future__ import annotations

import re
from typing import Any


_STRIP_RE  = re.compile(r"[^0-9.\-]")
_PREFIX_RE = re.compile(r"^-?(?:\d+(?:\.\d*)?|\.\d+)")


def to_number(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return value
    if value is None:
        return 0.0

    cleaned = _STRIP_RE.sub("", str(value))
    m = _PREFIX_RE.match(cleaned)
    if not m:
        return 0.0
    return float(m.group(0))
