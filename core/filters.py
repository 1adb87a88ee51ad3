"""
core/filters.py — Layered filter state for one evaluation.

Each sheet touched by an evaluation gets two row sets:
  original  — the sheet's rows as loaded, never modified
  chain     — the rows surviving the AND-chained condition groups so far

Stepping reference i against a sheet:
  i == 0 or logic OR   — start again from original, apply only reference i's
                         group, store the result as the new chain
  logic AND            — start from chain, apply reference i's group on top,
                         store it back

State is keyed by (file_id, sheet_name), so references pointing at the same
sheet share one chain in sequence while different sheets never interact.
A FilterState lives for a single evaluation; build a new one per call.
"""
from __future__ import annotations

import logging
from typing import Dict, Sequence

from .models import Condition, Rows, SheetKey
from .rules import apply_conditions


logger = logging.getLogger(__name__)


class FilterState:

    def __init__(self) -> None:
        self._original: Dict[SheetKey, Rows] = {}
        self._chain: Dict[SheetKey, Rows] = {}

    def __contains__(self, key: SheetKey) -> bool:
        return key in self._original

    def register(self, key: SheetKey, rows: Rows) -> None:
        """Record a sheet's unfiltered rows on first use. Later calls are no-ops."""
        if key in self._original:
            return
        self._original[key] = list(rows)
        self._chain[key] = list(rows)

    def original(self, key: SheetKey) -> Rows:
        return self._original.get(key, [])

    def chain(self, key: SheetKey) -> Rows:
        return self._chain.get(key, [])

    def step(
        self,
        key: SheetKey,
        index: int,
        logic: str,
        conditions: Sequence[Condition],
    ) -> Rows:
        """
        Advance the filter chain for one reference and return the rows that
        reference should read from.
        """
        reset = index == 0 or (logic or "AND").upper() == "OR"
        base = self._original.get(key, []) if reset else self._chain.get(key, [])

        rows = apply_conditions(list(base), conditions)
        self._chain[key] = rows

        logger.debug(
            "filter step %d %s on %s: %d -> %d rows (%d condition(s))",
            index, "reset" if reset else "chain", tuple(key),
            len(base), len(rows), len(conditions),
        )
        return rows
