"""
test_filters.py — Tests for core.filters.FilterState.

Covers:
  - register only records a sheet once and copies the rows
  - index 0 always starts from the original rows
  - OR resets to the original rows, AND chains on the previous result
  - an empty group still advances the chain (identity)
  - separate sheet keys never share state
"""
from __future__ import annotations

from core.filters import FilterState
from core.models import Condition, SheetKey


ROWS = [
    ["Name", "Amt"],
    ["test-1", "50"],
    ["ok-1", "100"],
    ["ok-2", "200"],
]

KEY = SheetKey("file_a", "Sales")


def _exclude(keyword, col="A"):
    return Condition(column=col, keyword=keyword, mode="exclude")


def _include(keyword, col="A"):
    return Condition(column=col, keyword=keyword, mode="include")


def test_register_records_once():
    state = FilterState()
    state.register(KEY, ROWS)
    state.register(KEY, [["other"]])
    assert state.original(KEY) == ROWS
    assert KEY in state


def test_register_copies_rows():
    rows = [list(r) for r in ROWS]
    state = FilterState()
    state.register(KEY, rows)
    rows.append(["late", "1"])
    assert len(state.original(KEY)) == 4


def test_unknown_key_is_empty():
    state = FilterState()
    assert state.original(KEY) == []
    assert state.chain(KEY) == []
    assert KEY not in state


def test_first_step_uses_original_even_with_and():
    state = FilterState()
    state.register(KEY, ROWS)
    out = state.step(KEY, 0, "AND", [_exclude("test")])
    assert [r[0] for r in out] == ["Name", "ok-1", "ok-2"]
    assert state.chain(KEY) == out


def test_and_chains_on_previous_result():
    state = FilterState()
    state.register(KEY, ROWS)
    state.step(KEY, 0, "AND", [_exclude("test")])
    out = state.step(KEY, 1, "AND", [_exclude("ok-1")])
    assert [r[0] for r in out] == ["Name", "ok-2"]


def test_or_resets_to_original():
    state = FilterState()
    state.register(KEY, ROWS)
    state.step(KEY, 0, "AND", [_include("ok")])
    out = state.step(KEY, 1, "OR", [_include("test")])
    assert [r[0] for r in out] == ["test-1"]


def test_or_with_empty_group_restores_original():
    state = FilterState()
    state.register(KEY, ROWS)
    state.step(KEY, 0, "AND", [_include("ok-2")])
    out = state.step(KEY, 1, "OR", [])
    assert out == ROWS


def test_and_with_empty_group_keeps_chain():
    state = FilterState()
    state.register(KEY, ROWS)
    first = state.step(KEY, 0, "AND", [_exclude("test")])
    out = state.step(KEY, 1, "AND", [])
    assert out == first


def test_original_never_modified():
    state = FilterState()
    state.register(KEY, ROWS)
    state.step(KEY, 0, "AND", [_include("nothing-matches")])
    assert state.original(KEY) == ROWS
    assert state.chain(KEY) == []


def test_distinct_sheets_do_not_interact():
    other = SheetKey("file_a", "Costs")
    state = FilterState()
    state.register(KEY, ROWS)
    state.register(other, ROWS)

    state.step(KEY, 0, "AND", [_include("ok-1")])
    out = state.step(other, 1, "AND", [])
    assert out == ROWS


def test_same_sheet_name_in_different_files_is_separate():
    other = SheetKey("file_b", "Sales")
    state = FilterState()
    state.register(KEY, ROWS)
    state.register(other, [["x", "1"]])

    state.step(KEY, 0, "AND", [_exclude("test")])
    assert state.chain(other) == [["x", "1"]]
