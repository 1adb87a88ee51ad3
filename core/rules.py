"""
core/rules.py — Row condition matching.

A condition tests one column of a row for a keyword:
  - the cell is stringified (None -> ""), lowercased, and searched for the
    lowercased keyword as a substring
  - an undecodable column or a cell past the end of the row reads as ""
    (so only an empty keyword matches it)

Include / Exclude:
  include   — row kept when the keyword is found.
  exclude   — row kept when the keyword is NOT found.

Condition groups fold left to right. The connector between condition i-1
and condition i is condition i-1's logic:
  result = keep[0]
  result = result AND keep[i]   if conditions[i-1].logic == "AND"
  result = result OR  keep[i]   otherwise
The last condition's logic is never read. An empty group keeps every row.

Nothing here raises on bad input; filtering must never abort a calculation.
"""
from __future__ import annotations

from typing import Any, List, Sequence

from .models import Condition
from .parsing import decode_column


def _cell_text(row: Sequence[Any], column: str) -> str:
    col_idx = decode_column(column)
    if col_idx is None or col_idx >= len(row):
        return ""
    value = row[col_idx]
    if value is None:
        return ""
    return str(value).lower()


def condition_keeps_row(row: Sequence[Any], cond: Condition) -> bool:
    keyword = str(cond.keyword or "").lower()
    found = keyword in _cell_text(row, cond.column)
    if cond.mode == "include":
        return found
    return not found


def group_keeps_row(row: Sequence[Any], conditions: Sequence[Condition]) -> bool:
    if not conditions:
        return True

    results = [condition_keeps_row(row, c) for c in conditions]

    keep = results[0]
    for i in range(1, len(results)):
        if (conditions[i - 1].logic or "AND").upper() == "AND":
            keep = keep and results[i]
        else:
            keep = keep or results[i]
    return keep


def apply_conditions(
    rows: List[List[Any]],
    conditions: Sequence[Condition],
) -> List[List[Any]]:
    """
    Filter rows by one condition group, preserving order.
    """
    if not conditions:
        return rows
    return [row for row in rows if group_keeps_row(row, conditions)]
