"""
core/engine.py — Rule evaluation.

Pipeline for one calculation:
  1. Group the flattened conditions by the reference that owns them
  2. Walk the references in order:
       custom           — add the literal value
       missing sheet    — skip (stale file id, removed sheet, empty sheet)
       otherwise        — filter step (core.filters), then contribution
                          (core.evaluator), added to the running total
  3. Return the total

logic only decides which filtered rows a reference sees; the total is
always a plain sum. No exception escapes evaluate(): anything unexpected
while handling a reference is logged and that reference contributes 0.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .evaluator import contribution
from .filters import FilterState
from .models import (
    Condition,
    CustomRef,
    Reference,
    RuleItem,
    SheetKey,
    TaggedCondition,
    WorkbookData,
)


logger = logging.getLogger(__name__)


# ── Flattening (authoring layer -> engine inputs) ─────────────────────────────

def flatten_rules(rules: Iterable[RuleItem]) -> Tuple[List[Reference], List[TaggedCondition]]:
    """
    Turn rule-builder items into the ordered reference list and the flat,
    index-tagged condition list the engine consumes.

    Rules with no sheet chosen are skipped (custom values need no sheet).
    Condition tags point at the position in the returned reference list.
    The first reference always starts a fresh chain, so its logic is AND.
    """
    refs: List[Reference] = []
    tagged: List[TaggedCondition] = []

    for rule in rules:
        ref = rule.reference
        if not isinstance(ref, CustomRef) and not ref.sheet_name:
            continue

        index = len(refs)
        if index == 0 and ref.logic != "AND":
            ref = replace(ref, logic="AND")
        refs.append(ref)

        for cond in rule.active_conditions:
            tagged.append(TaggedCondition(
                rule_index=index,
                file_id=ref.file_id,
                sheet_name=ref.sheet_name,
                condition=cond,
            ))

    return refs, tagged


def group_conditions(
    references: Sequence[Reference],
    conditions: Iterable[TaggedCondition],
) -> Dict[int, List[Condition]]:
    """
    Conditions by owning reference index, in their original order. A tag
    whose sheet does not match its reference is dropped.
    """
    groups: Dict[int, List[Condition]] = {}
    for tc in conditions:
        try:
            if not 0 <= tc.rule_index < len(references):
                continue
            ref = references[tc.rule_index]
            if tc.file_id != ref.file_id or tc.sheet_name != ref.sheet_name:
                continue
        except (AttributeError, TypeError):
            logger.debug("ignoring malformed condition tag %r", tc)
            continue
        groups.setdefault(tc.rule_index, []).append(tc.condition)
    return groups


# ── Evaluation ────────────────────────────────────────────────────────────────

def _sheet_rows(files: Mapping[str, WorkbookData], ref: Reference):
    wb = files.get(ref.file_id)
    if wb is None:
        return None
    sheet = wb.sheet(ref.sheet_name)
    if sheet is None or not sheet.rows:
        return None
    return sheet.rows


def evaluate(
    references: Sequence[Reference],
    files: Mapping[str, WorkbookData],
    conditions: Iterable[TaggedCondition] = (),
) -> float:
    """
    Evaluate the references against the loaded files and return the total.

    files maps file_id to its decoded workbook. A fresh FilterState is built
    for every call, so repeated calls with the same inputs give the same total.
    """
    references = list(references or ())
    groups = group_conditions(references, conditions or ())
    state = FilterState()
    total = 0.0

    for index, ref in enumerate(references):
        try:
            if isinstance(ref, CustomRef):
                value = contribution(ref, [])
                total += value
                logger.debug("ref %d custom: %r", index, value)
                continue

            rows = _sheet_rows(files, ref)
            if rows is None:
                logger.debug(
                    "ref %d skipped: sheet %r not loaded in file %r",
                    index, ref.sheet_name, ref.file_id,
                )
                continue

            key = SheetKey(ref.file_id, ref.sheet_name)
            state.register(key, rows)
            filtered = state.step(key, index, ref.logic, groups.get(index, []))

            value = contribution(ref, filtered)
            total += value
            logger.debug("ref %d on %s: %r (total %r)", index, tuple(key), value, total)
        except Exception:
            logger.warning("ref %d could not be evaluated; counted as 0", index, exc_info=True)

    return total


def evaluate_rules(rules: Iterable[RuleItem], files: Mapping[str, WorkbookData]) -> float:
    refs, tagged = flatten_rules(rules)
    return evaluate(refs, files, tagged)


def describe_process(rules: Sequence[RuleItem], total: Optional[float] = None) -> str:
    """
    One-line summary of how a calculation was layered, e.g.
    "Rule 1: 2 filter(s) → [OR] Rule 2: no filter → Result: 300".
    """
    parts = []
    for index, rule in enumerate(rules):
        label = f"[{rule.reference.logic}] " if index > 0 else ""
        n = len(rule.active_conditions)
        detail = f"{n} filter(s)" if n else "no filter"
        parts.append(f"{label}Rule {index + 1}: {detail}")
    if total is not None:
        parts.append(f"Result: {format_result(total)}")
    return " → ".join(parts)


def format_result(value: float) -> str:
    """Thousands-separated, at most two decimals ("1,234.5")."""
    text = f"{value:,.2f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    # values that round to zero keep no sign
    if text == "-0":
        text = "0"
    return text
