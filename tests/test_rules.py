"""
test_rules.py — Tests for row condition matching in core.rules.

Covers:
  - include / exclude matching, case-insensitive substring
  - None cells, short rows, undecodable columns
  - empty keyword
  - group folding: connector is the PREVIOUS condition's logic
  - last condition's logic is ignored
  - only AND connects with AND; a missing logic means AND
  - apply_conditions preserves order and leaves input untouched
"""
from __future__ import annotations

from core.models import Condition
from core.rules import apply_conditions, condition_keeps_row, group_keeps_row


# ══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ══════════════════════════════════════════════════════════════════════════════

def _c(keyword, col="A", mode="include", logic="AND"):
    return Condition(column=col, keyword=keyword, mode=mode, logic=logic)


# ══════════════════════════════════════════════════════════════════════════════
# SINGLE CONDITION
# ══════════════════════════════════════════════════════════════════════════════

def test_include_substring_match():
    assert condition_keeps_row(["banana"], _c("nan"))
    assert not condition_keeps_row(["apple"], _c("nan"))


def test_match_is_case_insensitive():
    assert condition_keeps_row(["Green APPLE"], _c("apple"))
    assert condition_keeps_row(["apple"], _c("APPLE"))


def test_exclude_inverts():
    assert not condition_keeps_row(["test-1"], _c("test", mode="exclude"))
    assert condition_keeps_row(["ok-1"], _c("test", mode="exclude"))


def test_numeric_cell_is_stringified():
    assert condition_keeps_row([2024], _c("20"))


def test_none_cell_reads_as_empty():
    assert not condition_keeps_row([None], _c("x"))
    assert condition_keeps_row([None], _c("x", mode="exclude"))


def test_short_row_reads_as_empty():
    assert not condition_keeps_row(["a"], _c("a", col="C"))
    assert condition_keeps_row(["a"], _c("a", col="C", mode="exclude"))


def test_bad_column_reads_as_empty():
    assert not condition_keeps_row(["abc"], _c("a", col="1"))


def test_empty_keyword_matches_everything():
    assert condition_keeps_row(["anything"], _c(""))
    assert condition_keeps_row([None], _c(""))
    assert not condition_keeps_row(["anything"], _c("", mode="exclude"))


# ══════════════════════════════════════════════════════════════════════════════
# GROUP FOLDING
# ══════════════════════════════════════════════════════════════════════════════

def test_empty_group_keeps_row():
    assert group_keeps_row(["x"], [])


def test_and_group_requires_all():
    conds = [_c("a", logic="AND"), _c("b", col="B")]
    assert group_keeps_row(["a", "b"], conds)
    assert not group_keeps_row(["a", "x"], conds)


def test_or_group_requires_any():
    conds = [_c("a", logic="OR"), _c("b", col="B")]
    assert group_keeps_row(["x", "b"], conds)
    assert group_keeps_row(["a", "x"], conds)
    assert not group_keeps_row(["x", "x"], conds)


def test_connector_comes_from_previous_condition():
    # second condition says OR, but it is last, so the first's AND applies
    conds = [_c("a", logic="AND"), _c("b", col="B", logic="OR")]
    assert not group_keeps_row(["a", "x"], conds)


def test_last_condition_logic_ignored():
    row = ["a"]
    assert group_keeps_row(row, [_c("a", logic="AND")]) == group_keeps_row(row, [_c("a", logic="OR")])


def test_fold_is_left_to_right():
    # (A has a OR B has b) AND C has c
    conds = [
        _c("a", logic="OR"),
        _c("b", col="B", logic="AND"),
        _c("c", col="C"),
    ]
    assert group_keeps_row(["a", "x", "c"], conds)
    assert group_keeps_row(["x", "b", "c"], conds)
    assert not group_keeps_row(["a", "b", "x"], conds)


def test_lowercase_logic_accepted():
    conds = [_c("a", logic="or"), _c("b", col="B")]
    assert group_keeps_row(["x", "b"], conds)


def test_unknown_logic_folds_as_or():
    conds = [_c("a", logic="XOR"), _c("b", col="B")]
    assert group_keeps_row(["x", "b"], conds)


def test_missing_logic_folds_as_and():
    conds = [_c("a", logic=None), _c("b", col="B")]
    assert not group_keeps_row(["x", "b"], conds)
    assert group_keeps_row(["a", "b"], conds)


# ══════════════════════════════════════════════════════════════════════════════
# apply_conditions
# ══════════════════════════════════════════════════════════════════════════════

def test_apply_no_conditions_returns_all():
    rows = [["a"], ["b"]]
    assert apply_conditions(rows, []) == rows


def test_apply_preserves_order():
    rows = [["b1"], ["a"], ["b2"], ["b3"]]
    out = apply_conditions(rows, [_c("b")])
    assert out == [["b1"], ["b2"], ["b3"]]


def test_apply_does_not_mutate_input():
    rows = [["keep"], ["drop"]]
    apply_conditions(rows, [_c("drop", mode="exclude")])
    assert rows == [["keep"], ["drop"]]


def test_apply_empty_rows():
    assert apply_conditions([], [_c("x")]) == []
