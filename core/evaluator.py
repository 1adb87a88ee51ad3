"""
core/evaluator.py — Numeric contribution of a single reference.

The rows passed in are the (possibly filtered) rows produced by the filter
step, so row numbers index into the filtered set, not the original sheet.
Malformed addresses and out-of-range lookups contribute 0.
"""
from __future__ import annotations

from typing import Any, Optional

from .coerce import to_number
from .models import CellRef, ColumnRef, CustomRef, Reference, RowRef, Rows
from .parsing import decode_cell, decode_column, parse_row_number


def _cell(rows: Rows, r: int, c: int) -> Any:
    if r < 0 or r >= len(rows):
        return None
    row = rows[r]
    if row is None or c < 0 or c >= len(row):
        return None
    return row[c]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def last_non_empty_row(rows: Rows, col: int) -> int:
    """
    Index of the last row whose cell in col is neither None nor "".
    An entirely empty column falls back to the last row index (-1 for no rows).
    """
    for r in range(len(rows) - 1, -1, -1):
        if not _is_blank(_cell(rows, r, col)):
            return r
    return len(rows) - 1


def _bound(value: Optional[int]) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _column_total(ref: ColumnRef, rows: Rows) -> float:
    col = decode_column(ref.column)
    if col is None:
        return 0

    start_row = _bound(ref.start_row)
    end_row = _bound(ref.end_row)

    start = (start_row if start_row is not None else 1) - 1
    end = end_row - 1 if end_row else last_non_empty_row(rows, col)
    # rows past the data read as empty; no need to walk them
    end = min(end, len(rows) - 1)

    total = 0
    for r in range(start, end + 1):
        total += to_number(_cell(rows, r, col))
    return total


def contribution(ref: Reference, rows: Rows) -> float:
    if isinstance(ref, CustomRef):
        return to_number(ref.value)

    if isinstance(ref, CellRef):
        addr = decode_cell(ref.address)
        if addr is None:
            return 0
        return to_number(_cell(rows, addr.row, addr.col))

    if isinstance(ref, RowRef):
        r = parse_row_number(ref.row)
        if r is None or r >= len(rows) or rows[r] is None:
            return 0
        return sum(to_number(v) for v in rows[r])

    if isinstance(ref, ColumnRef):
        return _column_total(ref, rows)

    return 0
