"""
core/pool.py — Loaded file pool.

Holds every decoded workbook by file id, in load order. Display names are
kept unique ("sales.xlsx", "sales-1.xlsx", "sales-2.xlsx") and the pool is
capped at MAX_FILES files. Loading is batch-tolerant: a file that fails to
load is reported and skipped, the rest of the batch still loads.
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from .errors import AppError, NOT_A_SPREADSHEET, TOO_MANY_FILES
from .io import is_spreadsheet_path, load_workbook_data
from .models import WorkbookData


logger = logging.getLogger(__name__)

MAX_FILES = 6

_NUM_SUFFIX_RE = re.compile(r"\s*-\d+$")


@dataclass
class LoadReport:
    loaded: List[WorkbookData] = field(default_factory=list)
    errors: List[AppError] = field(default_factory=list)
    skipped_over_limit: int = 0

    @property
    def ok(self) -> bool:
        return not self.errors and not self.skipped_over_limit


class FilePool:

    def __init__(self, max_files: int = MAX_FILES) -> None:
        self.max_files = max_files
        self._files: Dict[str, WorkbookData] = {}

    # ---------- Queries ----------

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, file_id: str) -> bool:
        return file_id in self._files

    def get(self, file_id: str) -> Optional[WorkbookData]:
        return self._files.get(file_id)

    @property
    def files(self) -> List[WorkbookData]:
        return list(self._files.values())

    @property
    def remaining_slots(self) -> int:
        return max(0, self.max_files - len(self._files))

    def as_mapping(self) -> Dict[str, WorkbookData]:
        """Snapshot for the evaluation engine (file_id -> workbook)."""
        return dict(self._files)

    # ---------- Naming ----------

    def unique_name(self, name: str) -> str:
        existing = {f.name for f in self._files.values()}
        if name not in existing:
            return name

        stem, ext = os.path.splitext(name)
        base = _NUM_SUFFIX_RE.sub("", stem)
        index = 1
        candidate = f"{base}-{index}{ext}"
        while candidate in existing:
            index += 1
            candidate = f"{base}-{index}{ext}"
        return candidate

    # ---------- Mutation ----------

    def add(self, wb: WorkbookData) -> WorkbookData:
        if len(self._files) >= self.max_files:
            raise AppError(
                TOO_MANY_FILES,
                f"At most {self.max_files} files can be loaded",
                {"limit": self.max_files},
            )
        wb.name = self.unique_name(wb.name)
        self._files[wb.file_id] = wb
        return wb

    def add_paths(
        self,
        paths: Iterable[str],
        loader: Callable[[str], WorkbookData] = load_workbook_data,
    ) -> LoadReport:
        report = LoadReport()
        for path in paths:
            if not is_spreadsheet_path(path):
                report.errors.append(AppError(
                    NOT_A_SPREADSHEET,
                    f"Unsupported file type: {path}",
                    {"path": path},
                ))
                continue
            if self.remaining_slots == 0:
                report.skipped_over_limit += 1
                continue
            try:
                wb = loader(path)
            except AppError as e:
                logger.warning("could not load %s: %s", path, e)
                report.errors.append(e)
                continue
            report.loaded.append(self.add(wb))

        if report.skipped_over_limit:
            logger.warning(
                "file limit %d reached; skipped %d file(s)",
                self.max_files, report.skipped_over_limit,
            )
        return report

    def remove(self, file_id: str) -> bool:
        return self._files.pop(file_id, None) is not None

    def clear(self) -> None:
        self._files.clear()
