"""
core/parsing.py — Cell address codec.

Converts human-readable spreadsheet addresses ("A1", "B", "12") to zero-based
coordinates. Every decoder returns None on malformed input instead of
raising: callers treat an undecodable reference as contributing zero.
"""
from __future__ import annotations

import re
from typing import NamedTuple, Optional


_COL_RE  = re.compile(r"^[A-Z]+$")
_CELL_RE = re.compile(r"^([A-Z]+)(\d+)$")
_ROW_RE  = re.compile(r"^\d+$")


class CellAddress(NamedTuple):
    row: int    # 0-based
    col: int    # 0-based


def _letters_to_index(s: str) -> int:
    n = 0
    for ch in s:
        n = n * 26 + (ord(ch) - ord("A") + 1)
    return n - 1


def decode_column(letters: str) -> Optional[int]:
    """
    Convert column letters to a 0-based index (A->0, Z->25, AA->26).
    """
    s = str(letters or "").strip().upper()
    if not _COL_RE.match(s):
        return None
    return _letters_to_index(s)


def encode_column(index: int) -> str:
    """
    Convert a 0-based index back to column letters (0->A).
    """
    if index < 0:
        raise ValueError(f"Bad column index: {index}")
    out = []
    x = index + 1
    while x:
        x, rem = divmod(x - 1, 26)
        out.append(chr(ord("A") + rem))
    return "".join(reversed(out))


def decode_cell(address: str) -> Optional[CellAddress]:
    """
    Parse an A1-style address ("B12" -> row=11, col=1).
    Row 0 ("A0") is malformed.
    """
    s = str(address or "").strip().upper()
    m = _CELL_RE.match(s)
    if not m:
        return None
    row = int(m.group(2))
    if row < 1:
        return None
    return CellAddress(row=row - 1, col=_letters_to_index(m.group(1)))


def parse_row_number(text) -> Optional[int]:
    """
    Convert a 1-based row number ("5" or 5) to a 0-based index.
    """
    if isinstance(text, bool):
        return None
    if isinstance(text, int):
        return text - 1 if text >= 1 else None
    s = (text or "").strip() if isinstance(text, str) else ""
    if not _ROW_RE.match(s):
        return None
    n = int(s)
    if n < 1:
        return None
    return n - 1
