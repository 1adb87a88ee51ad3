"""
core/session.py — Calculation tabs over the file pool.

One tab per loaded file. Each tab owns its rule list and last result.
Non-zero results are appended to the history log; the engine itself never
touches history.

This module has NO Tk dependency — the GUI drives it, tests drive it directly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .engine import evaluate_rules
from .errors import AppError, FILE_NOT_LOADED, NO_RULES
from .history import HistoryStore
from .models import RuleItem
from .pool import FilePool


logger = logging.getLogger(__name__)


@dataclass
class CalcTab:
    file_id: str
    label: str
    result: float = 0.0
    result_name: str = ""
    rules: List[RuleItem] = field(default_factory=list)


class Session:

    def __init__(self, pool: Optional[FilePool] = None, history: Optional[HistoryStore] = None) -> None:
        self.pool = pool if pool is not None else FilePool()
        self.history = history if history is not None else HistoryStore()
        self.tabs: List[CalcTab] = []
        self.active_key: str = ""

    # ---------- Tabs ----------

    def tab(self, file_id: str) -> Optional[CalcTab]:
        for t in self.tabs:
            if t.file_id == file_id:
                return t
        return None

    def _require_tab(self, file_id: str) -> CalcTab:
        t = self.tab(file_id)
        if t is None:
            raise AppError(FILE_NOT_LOADED, f"No open tab for file {file_id!r}")
        return t

    def open_tab(self, file_id: str) -> CalcTab:
        """Open (or focus) the tab for a loaded file."""
        existing = self.tab(file_id)
        if existing is not None:
            self.active_key = file_id
            return existing

        wb = self.pool.get(file_id)
        if wb is None:
            raise AppError(FILE_NOT_LOADED, f"File {file_id!r} is not loaded")

        t = CalcTab(file_id=file_id, label=wb.name)
        self.tabs.append(t)
        self.active_key = file_id
        return t

    def close_tab(self, file_id: str) -> str:
        """Close a tab; the last remaining tab becomes active if needed."""
        self.tabs = [t for t in self.tabs if t.file_id != file_id]
        if self.active_key == file_id:
            self.active_key = self.tabs[-1].file_id if self.tabs else ""
        return self.active_key

    # ---------- Files ----------

    def remove_file(self, file_id: str) -> None:
        self.pool.remove(file_id)
        remaining = [t for t in self.tabs if t.file_id != file_id]
        if self.active_key == file_id:
            self.active_key = remaining[0].file_id if remaining else ""
        self.tabs = remaining

    def clear_files(self) -> None:
        self.pool.clear()
        self.tabs = []
        self.active_key = ""

    # ---------- Rules ----------

    def add_rule(self, file_id: str, rule: RuleItem) -> None:
        self._require_tab(file_id).rules.append(rule)

    def remove_rule(self, file_id: str, index: int) -> None:
        t = self._require_tab(file_id)
        if 0 <= index < len(t.rules):
            del t.rules[index]
        if not t.rules:
            t.result = 0.0

    # ---------- Calculation ----------

    def _file_name(self, file_id: str) -> str:
        wb = self.pool.get(file_id)
        return wb.name if wb is not None else ""

    def calculate(self, file_id: str) -> float:
        t = self._require_tab(file_id)
        if not t.rules:
            raise AppError(NO_RULES, "Add at least one rule before calculating")

        total = evaluate_rules(t.rules, self.pool.as_mapping())
        t.result = total
        logger.info("calculated %s: %s", t.label, total)

        if total != 0:
            self.history.add(self._file_name(file_id), t.result_name, total)
        return total

    def rename_result(self, file_id: str, name: str) -> None:
        """Relabel a tab's result; a non-zero result is logged again under the new name."""
        t = self._require_tab(file_id)
        t.result_name = name
        if t.result != 0:
            self.history.add(self._file_name(file_id), name, t.result)
