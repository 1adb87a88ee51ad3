from __future__ import annotations

import csv
import logging
import os
import uuid
from typing import Any, List, Optional

from openpyxl import load_workbook

from .errors import AppError, FILE_LOCKED, NOT_A_SPREADSHEET, SOURCE_READ_FAILED
from .models import SheetData, WorkbookData


logger = logging.getLogger(__name__)

SPREADSHEET_EXTENSIONS = (".xlsx", ".xlsm", ".csv")


def is_occupied(value: Any) -> bool:
    """
    Single occupancy definition for trailing-row trimming.
    """
    if value is None:
        return False
    if isinstance(value, str) and value == "":
        return False
    return True


def trim_trailing_rows(rows: List[List[Any]]) -> List[List[Any]]:
    """
    Drop fully-empty rows at the bottom. Interior blank rows are kept so
    row numbers still line up with the spreadsheet.
    """
    end = len(rows)
    while end > 0 and not any(is_occupied(v) for v in rows[end - 1]):
        end -= 1
    return rows[:end]


def is_spreadsheet_path(path: str) -> bool:
    return os.path.splitext(path)[1].lower() in SPREADSHEET_EXTENSIONS


def new_file_id() -> str:
    return f"file_{uuid.uuid4().hex[:12]}"


def load_csv(path: str) -> List[SheetData]:
    with open(path, newline="", encoding="utf-8-sig") as f:
        reader = csv.reader(f)
        rows = [list(row) for row in reader]

    name = os.path.splitext(os.path.basename(path))[0] or "Sheet1"
    return [SheetData(name=name, rows=trim_trailing_rows(rows))]


def load_xlsx(path: str) -> List[SheetData]:
    wb = load_workbook(path, read_only=True, data_only=True)
    try:
        sheets = []
        for ws in wb.worksheets:
            rows = [list(row) for row in ws.iter_rows(values_only=True)]
            sheets.append(SheetData(name=ws.title, rows=trim_trailing_rows(rows)))
        return sheets
    finally:
        wb.close()


def load_workbook_data(path: str, file_id: Optional[str] = None) -> WorkbookData:
    """
    Decode a spreadsheet file into plain rows per sheet.
    Raises AppError on failure; callers decide whether to skip or abort.
    """
    if not is_spreadsheet_path(path):
        raise AppError(
            NOT_A_SPREADSHEET,
            f"Unsupported file type: {path}",
            {"path": path},
        )
    ext = os.path.splitext(path)[1].lower()
    try:
        if ext == ".csv":
            sheets = load_csv(path)
        else:
            sheets = load_xlsx(path)
    except PermissionError:
        raise AppError(
            FILE_LOCKED,
            f"File is locked: {path}",
            {"path": path},
        )
    except AppError:
        raise
    except Exception as e:
        raise AppError(
            SOURCE_READ_FAILED,
            f"Failed to read {path}: {e}",
            {"path": path},
        )

    logger.info("loaded %s (%d sheet(s))", path, len(sheets))
    return WorkbookData(
        file_id=file_id or new_file_id(),
        name=os.path.basename(path),
        sheets=sheets,
        path=path,
    )
