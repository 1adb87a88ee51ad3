"""
test_parsing.py — Tests for the cell address codec in core.parsing.

Covers:
  - decode_column: single/multi letter, lowercase, whitespace, malformed
  - encode_column: inverse of decode_column, negative index rejected
  - decode_cell: A1 style, row 0, digits-first, junk
  - parse_row_number: strings, ints, booleans, blanks
"""
from __future__ import annotations

import pytest

from core.parsing import (
    CellAddress,
    decode_cell,
    decode_column,
    encode_column,
    parse_row_number,
)


# ══════════════════════════════════════════════════════════════════════════════
# decode_column
# ══════════════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize("letters,expected", [
    ("A", 0),
    ("B", 1),
    ("Z", 25),
    ("AA", 26),
    ("AZ", 51),
    ("BA", 52),
    ("ZZ", 701),
    ("AAA", 702),
])
def test_decode_column_known_values(letters, expected):
    assert decode_column(letters) == expected


def test_decode_column_is_case_insensitive():
    assert decode_column("ab") == decode_column("AB") == 27


def test_decode_column_strips_whitespace():
    assert decode_column("  c ") == 2


@pytest.mark.parametrize("bad", ["", "1", "A1", "A-B", "Ä", None])
def test_decode_column_malformed_is_none(bad):
    assert decode_column(bad) is None


# ══════════════════════════════════════════════════════════════════════════════
# encode_column
# ══════════════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize("index", [0, 1, 25, 26, 27, 51, 52, 701, 702, 16383])
def test_encode_column_inverts_decode(index):
    assert decode_column(encode_column(index)) == index


def test_encode_column_known_values():
    assert encode_column(0) == "A"
    assert encode_column(26) == "AA"
    assert encode_column(16383) == "XFD"


def test_encode_column_negative_raises():
    with pytest.raises(ValueError):
        encode_column(-1)


# ══════════════════════════════════════════════════════════════════════════════
# decode_cell
# ══════════════════════════════════════════════════════════════════════════════

def test_decode_cell_basic():
    assert decode_cell("A1") == CellAddress(row=0, col=0)
    assert decode_cell("B12") == CellAddress(row=11, col=1)


def test_decode_cell_multi_letter():
    addr = decode_cell("AA100")
    assert addr.row == 99
    assert addr.col == 26


def test_decode_cell_lowercase_and_padding():
    assert decode_cell(" b2 ") == CellAddress(row=1, col=1)


@pytest.mark.parametrize("bad", ["", "A", "12", "1A", "A0", "A-1", "A1B", "B 2", None])
def test_decode_cell_malformed_is_none(bad):
    assert decode_cell(bad) is None


# ══════════════════════════════════════════════════════════════════════════════
# parse_row_number
# ══════════════════════════════════════════════════════════════════════════════

def test_parse_row_number_string():
    assert parse_row_number("1") == 0
    assert parse_row_number(" 10 ") == 9


def test_parse_row_number_int():
    assert parse_row_number(3) == 2


@pytest.mark.parametrize("bad", ["", "0", "-1", "1.5", "abc", 0, -4, True, False, None])
def test_parse_row_number_malformed_is_none(bad):
    assert parse_row_number(bad) is None
