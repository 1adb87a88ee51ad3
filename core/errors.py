from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AppError(Exception):
    """
    User-facing error with a short code and structured details.
    Raised by the loading, history and session layers. The evaluation
    engine itself never raises; it degrades to a zero contribution.
    """
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} ({self.details})"
        return f"{self.code}: {self.message}"


# ── Error codes (keep stable for tests and GUI) ───────────────────────────────

SOURCE_READ_FAILED = "SOURCE_READ_FAILED"
NOT_A_SPREADSHEET  = "NOT_A_SPREADSHEET"
FILE_LOCKED        = "FILE_LOCKED"
TOO_MANY_FILES     = "TOO_MANY_FILES"
FILE_NOT_LOADED    = "FILE_NOT_LOADED"
NO_RULES           = "NO_RULES"
SAVE_FAILED        = "SAVE_FAILED"


# ── Friendly message lookup ───────────────────────────────────────────────────

def _fname(e: AppError) -> str:
    if e.details and "path" in e.details:
        return f" ({os.path.basename(e.details['path'])})"
    return ""


def friendly_message(e: AppError) -> str:
    """
    Return a plain-English one-liner suitable for display in a GUI dialog.
    Never exposes raw tracebacks or internal code paths.
    """
    code = e.code
    msg  = e.message or ""

    if code == FILE_LOCKED:
        return f"File is open in another program{_fname(e)}. Close it and try again."

    if code == NOT_A_SPREADSHEET:
        return f"Not an Excel or CSV file{_fname(e)}. It was skipped."

    if code == SOURCE_READ_FAILED:
        if "no such file" in msg.lower() or "not found" in msg.lower():
            return f"File not found{_fname(e)}. Check that the file path is correct."
        return f"Could not read the file{_fname(e)}. Check that it is a valid XLSX or CSV.\n({msg})"

    if code == TOO_MANY_FILES:
        limit = (e.details or {}).get("limit", "")
        suffix = f" (at most {limit})" if limit else ""
        return f"File limit reached{suffix}. Remove some files before adding more."

    if code == FILE_NOT_LOADED:
        return "That file is no longer loaded. Add it again to keep calculating."

    if code == NO_RULES:
        return "Add at least one rule before calculating."

    if code == SAVE_FAILED:
        if "permission" in msg.lower() or "locked" in msg.lower() or "access" in msg.lower():
            return f"Could not save history — file is open in another program{_fname(e)}."
        return f"Could not save the calculation history{_fname(e)}. Check that the folder exists."

    # Fallback — clean up the raw message, never show raw tracebacks
    clean = msg.splitlines()[0] if msg else "An unexpected error occurred."
    return clean
