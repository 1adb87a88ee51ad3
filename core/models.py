from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Literal, NamedTuple, Optional, Union


Logic = Literal["AND", "OR"]
FilterMode = Literal["exclude", "include"]

Rows = List[List[Any]]


# ---- Loaded spreadsheet data ----

class SheetKey(NamedTuple):
    """Composite key for per-sheet state. Never joined into a string."""
    file_id: str
    sheet_name: str


@dataclass
class SheetData:
    name: str
    rows: Rows = field(default_factory=list)     # rows[r][c], may be jagged


@dataclass
class WorkbookData:
    """
    One loaded file. name is the display name (made unique by the file pool),
    path is where it was read from ("" for in-memory data).
    """
    file_id: str
    name: str
    sheets: List[SheetData] = field(default_factory=list)
    path: str = ""

    def sheet(self, name: str) -> Optional[SheetData]:
        for s in self.sheets:
            if s.name == name:
                return s
        return None

    @property
    def sheet_names(self) -> List[str]:
        return [s.name for s in self.sheets]


# ---- References (one variant per kind) ----

@dataclass
class CellRef:
    """Single cell, A1-style address."""
    file_id: str
    sheet_name: str
    address: str
    logic: Logic = "AND"


@dataclass
class RowRef:
    """Whole row; row is the 1-based number as typed by the user."""
    file_id: str
    sheet_name: str
    row: str
    logic: Logic = "AND"


@dataclass
class ColumnRef:
    """
    Column range. start_row/end_row are 1-based and inclusive.
    end_row None means "last non-empty cell in this column".
    """
    file_id: str
    sheet_name: str
    column: str
    start_row: Optional[int] = None
    end_row: Optional[int] = None
    logic: Logic = "AND"


@dataclass
class CustomRef:
    """Literal value; no sheet lookup."""
    value: Optional[float] = None
    description: str = ""
    file_id: str = ""
    sheet_name: str = ""
    logic: Logic = "AND"


Reference = Union[CellRef, RowRef, ColumnRef, CustomRef]

REFERENCE_KINDS = {
    "cell": CellRef,
    "row": RowRef,
    "column": ColumnRef,
    "custom": CustomRef,
}


def reference_kind(ref: Reference) -> str:
    for kind, cls in REFERENCE_KINDS.items():
        if isinstance(ref, cls):
            return kind
    raise TypeError(f"Not a reference: {ref!r}")


# ---- Row conditions ----

@dataclass
class Condition:
    """
    Keyword filter on one column. logic is the connector to the NEXT
    condition in the same group; it is ignored on the last condition.
    """
    column: str = ""
    keyword: str = ""
    mode: FilterMode = "exclude"
    logic: Logic = "AND"


@dataclass
class TaggedCondition:
    """Flattened condition, tagged with the index of the reference that owns it."""
    rule_index: int
    file_id: str
    sheet_name: str
    condition: Condition


# ---- Authoring layer ----

@dataclass
class RuleItem:
    """
    One rule as edited in the rule builder: a reference plus its optional
    condition group. Conditions only apply while filter_enabled is set.
    """
    reference: Reference
    filter_enabled: bool = False
    conditions: List[Condition] = field(default_factory=list)

    @property
    def active_conditions(self) -> List[Condition]:
        return list(self.conditions) if self.filter_enabled else []


# ---- History ----

@dataclass
class HistoryEntry:
    time: str
    file_name: str
    sheet_name: str
    result: float
