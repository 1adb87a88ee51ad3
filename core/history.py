from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from .engine import format_result
from .errors import AppError, SAVE_FAILED
from .models import HistoryEntry


logger = logging.getLogger(__name__)

ENV_HISTORY_PATH = "SHEET_TALLY_HISTORY_PATH"

HISTORY_LIMIT = 200
UNTITLED_SHEET = "Untitled sheet"
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_history_path(project_root: Optional[str] = None) -> str:
    """Resolve the history file path.

    Priority:
    1) SHEET_TALLY_HISTORY_PATH env var (absolute or relative)
    2) User-home scoped default: ~/.sheet_tally/calc-history.json
    """
    env = os.getenv(ENV_HISTORY_PATH)
    if env:
        p = Path(env)
        if not p.is_absolute():
            base = Path(project_root) if project_root else Path.cwd()
            p = base / p
        return str(p)

    base = Path.home() / ".sheet_tally"
    return str(base / "calc-history.json")


def atomic_write_text(path: str, text: str, encoding: str = "utf-8") -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".tmp")
    tmp.write_text(text, encoding=encoding)
    os.replace(str(tmp), str(p))


def _entry_from_dict(d) -> Optional[HistoryEntry]:
    if not isinstance(d, dict):
        return None
    try:
        return HistoryEntry(
            time=str(d.get("time", "")),
            file_name=str(d.get("file_name", "")),
            sheet_name=str(d.get("sheet_name", "")),
            result=float(d.get("result", 0)),
        )
    except (TypeError, ValueError):
        return None


def format_entry(entry: HistoryEntry) -> str:
    return f"{entry.sheet_name}: {format_result(entry.result)}"


class HistoryStore:
    """
    Rolling calculation log, newest first, capped at HISTORY_LIMIT entries.

    A missing or unreadable file loads as an empty log. Writes go through a
    temp file + os.replace so a crash never leaves half-written JSON.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        clock: Callable[[], datetime] = datetime.now,
        limit: int = HISTORY_LIMIT,
    ) -> None:
        self.path = path or resolve_history_path()
        self._clock = clock
        self.limit = limit

    def load(self) -> List[HistoryEntry]:
        p = Path(self.path)
        if not p.exists():
            return []
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("could not read history %s: %s", self.path, e)
            return []
        if not isinstance(data, list):
            logger.warning("history %s is not a list; ignoring it", self.path)
            return []
        entries = [_entry_from_dict(d) for d in data]
        return [e for e in entries if e is not None]

    def _write(self, entries: List[HistoryEntry]) -> None:
        payload = json.dumps([asdict(e) for e in entries], indent=2, ensure_ascii=False)
        try:
            atomic_write_text(self.path, payload)
        except OSError as e:
            raise AppError(SAVE_FAILED, str(e), {"path": self.path})

    def add(self, file_name: str, sheet_name: str, result: float) -> HistoryEntry:
        entry = HistoryEntry(
            time=self._clock().strftime(TIME_FORMAT),
            file_name=file_name,
            sheet_name=sheet_name or UNTITLED_SHEET,
            result=result,
        )
        entries = self.load()
        entries.insert(0, entry)
        del entries[self.limit:]
        self._write(entries)
        logger.info("history: %s = %s", entry.sheet_name, entry.result)
        return entry

    def clear(self) -> None:
        self._write([])
