from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable, Dict, List, Optional, Tuple

from core.engine import format_result
from core.parsing import encode_column
from core.models import (
    CellRef,
    ColumnRef,
    Condition,
    CustomRef,
    Reference,
    RowRef,
    RuleItem,
    reference_kind,
)
from core.session import CalcTab, Session
from gui.tooltip import add_tooltip

# NOTE: GUI-only module. Reference/condition semantics live in core.


KIND_LABELS = [
    ("cell", "Cell"),
    ("row", "Whole row"),
    ("column", "Column range"),
    ("custom", "Custom value"),
]
_LABEL_TO_KIND = {label: kind for kind, label in KIND_LABELS}
_KIND_TO_LABEL = {kind: label for kind, label in KIND_LABELS}

MODE_LABELS = [("exclude", "Exclude containing"), ("include", "Only keep containing")]
_LABEL_TO_MODE = {label: mode for mode, label in MODE_LABELS}
_MODE_TO_LABEL = {mode: label for mode, label in MODE_LABELS}

_REF_HINTS = {"cell": "A1", "row": "5", "column": "B"}

USED_MARK = "✓ "


def _opt_int(text: str) -> Optional[int]:
    s = (text or "").strip()
    if not s.isdigit():
        return None
    n = int(s)
    return n if n >= 1 else None


def _opt_float(text: str) -> Optional[float]:
    s = (text or "").strip().replace(",", "")
    try:
        return float(s)
    except ValueError:
        return None


def reference_from_fields(
    kind: str,
    file_id: str,
    sheet_name: str,
    logic: str,
    ref_text: str = "",
    start_row: str = "",
    end_row: str = "",
    value: str = "",
    description: str = "",
) -> Reference:
    """Build the reference variant for the rule card's current field values."""
    logic = "OR" if (logic or "").upper() == "OR" else "AND"
    if kind == "row":
        return RowRef(file_id=file_id, sheet_name=sheet_name, row=ref_text.strip(), logic=logic)
    if kind == "column":
        return ColumnRef(
            file_id=file_id,
            sheet_name=sheet_name,
            column=ref_text.strip().upper(),
            start_row=_opt_int(start_row),
            end_row=_opt_int(end_row),
            logic=logic,
        )
    if kind == "custom":
        return CustomRef(
            value=_opt_float(value),
            description=description,
            file_id=file_id,
            sheet_name=sheet_name,
            logic=logic,
        )
    return CellRef(file_id=file_id, sheet_name=sheet_name, address=ref_text.strip().upper(), logic=logic)


def fields_from_reference(ref: Reference) -> Dict[str, str]:
    fields = {
        "kind": reference_kind(ref),
        "ref_text": "",
        "start_row": "",
        "end_row": "",
        "value": "",
        "description": "",
    }
    if isinstance(ref, CellRef):
        fields["ref_text"] = ref.address
    elif isinstance(ref, RowRef):
        fields["ref_text"] = ref.row
    elif isinstance(ref, ColumnRef):
        fields["ref_text"] = ref.column
        fields["start_row"] = "" if ref.start_row is None else str(ref.start_row)
        fields["end_row"] = "" if ref.end_row is None else str(ref.end_row)
    elif isinstance(ref, CustomRef):
        fields["value"] = "" if ref.value is None else format(ref.value, "g")
        fields["description"] = ref.description
    return fields


class RuleBuilder(ttk.Frame):
    """
    One calculation tab: the rule cards for a file, the Calculate button and
    the result panel. The CalcTab's rule list is the single source of truth;
    every field edit writes straight back into it.
    """

    def __init__(
        self,
        master,
        session: Session,
        tab: CalcTab,
        on_calculate: Callable[[str], None],
        on_rename: Callable[[str, str], None],
    ) -> None:
        super().__init__(master, padding=8)
        self.session = session
        self.pool = session.pool
        self.tab = tab
        self._on_calculate = on_calculate
        self._on_rename = on_rename

        self.columnconfigure(0, weight=1)
        self.rowconfigure(1, weight=1)

        top = ttk.Frame(self)
        top.grid(row=0, column=0, sticky="ew")
        top.columnconfigure(1, weight=1)
        ttk.Button(top, text="+ Add rule", command=self.add_rule).grid(row=0, column=0, sticky="w")
        self.calc_button = ttk.Button(
            top, text="Calculate", style="RunAccent.TButton",
            command=lambda: self._on_calculate(self.tab.file_id),
        )
        self.calc_button.grid(row=0, column=2, sticky="e")
        add_tooltip(self.calc_button, "Apply every rule in order and add up the results.")

        # Scrollable rules area
        area = ttk.Frame(self)
        area.grid(row=1, column=0, sticky="nsew", pady=(8, 0))
        area.columnconfigure(0, weight=1)
        area.rowconfigure(0, weight=1)

        self.rules_canvas = tk.Canvas(area, height=300, background="white", highlightthickness=0)
        self.rules_canvas.grid(row=0, column=0, sticky="nsew")
        scroll = ttk.Scrollbar(area, orient="vertical", command=self.rules_canvas.yview)
        scroll.grid(row=0, column=1, sticky="ns")
        self.rules_canvas.configure(yscrollcommand=scroll.set)

        self.rules_frame = tk.Frame(self.rules_canvas, background="white")
        self.rules_frame.columnconfigure(0, weight=1)
        self.rules_canvas.create_window((0, 0), window=self.rules_frame, anchor="nw")

        def _on_canvas_resize(event):
            self.rules_canvas.configure(scrollregion=self.rules_canvas.bbox("all"))
            self.rules_canvas.itemconfig("all", width=event.width)

        self.rules_canvas.bind("<Configure>", _on_canvas_resize)
        self.rules_frame.bind(
            "<Configure>",
            lambda e: self.rules_canvas.configure(scrollregion=self.rules_canvas.bbox("all")),
        )

        # Result panel
        result_box = ttk.LabelFrame(self, text="Result", padding=10)
        result_box.grid(row=2, column=0, sticky="ew", pady=(10, 0))
        result_box.columnconfigure(1, weight=1)

        ttk.Label(result_box, text="Name:").grid(row=0, column=0, sticky="w")
        self.result_name_var = tk.StringVar(value=tab.result_name)
        name_entry = ttk.Entry(result_box, textvariable=self.result_name_var, width=30)
        name_entry.grid(row=0, column=1, sticky="w", padx=(6, 0))
        name_entry.bind("<Return>", lambda e: self.commit_result_name())
        name_entry.bind("<FocusOut>", lambda e: self.commit_result_name())

        self.result_var = tk.StringVar()
        self.result_label = tk.Label(result_box, textvariable=self.result_var, font=("Segoe UI", 28, "bold"))
        self.result_label.grid(row=1, column=0, columnspan=2, sticky="w", pady=(8, 0))
        self.copy_button = ttk.Button(result_box, text="Copy", command=self.copy_result)
        self.copy_button.grid(row=1, column=2, sticky="e")

        self.rebuild()
        self.show_result()

    # ---------------- Sheets ----------------

    def sheet_choices(self) -> List[Tuple[str, str, str]]:
        """
        (label, file_id, sheet_name) for every sheet of every loaded file.
        Sheets already read by a rule in this tab are marked with a check.
        """
        used = {(r.reference.file_id, r.reference.sheet_name) for r in self.tab.rules}
        out = []
        for wb in self.pool.files:
            for name in wb.sheet_names:
                mark = USED_MARK if (wb.file_id, name) in used else ""
                out.append((f"{mark}{wb.name} / {name}", wb.file_id, name))
        return out

    def _sheet_label(self, file_id: str, sheet_name: str) -> str:
        for label, fid, name in self.sheet_choices():
            if fid == file_id and name == sheet_name:
                return label
        return ""

    def _default_sheet(self) -> Tuple[str, str]:
        wb = self.pool.get(self.tab.file_id)
        if wb is None or not wb.sheets:
            return self.tab.file_id, ""
        return wb.file_id, wb.sheets[0].name

    def column_hint(self, file_id: str, sheet_name: str) -> str:
        """Column range label for the widest row of a sheet ("" when unknown)."""
        wb = self.pool.get(file_id)
        sheet = wb.sheet(sheet_name) if wb is not None else None
        if sheet is None:
            return ""
        width = max((len(r) for r in sheet.rows if r), default=0)
        if width == 0:
            return ""
        return f"Columns A to {encode_column(width - 1)} in {sheet_name}"

    def _rule_hint(self, rule: RuleItem, example: str = "") -> str:
        parts = [f"e.g. {example}"] if example else []
        parts.append(self.column_hint(rule.reference.file_id, rule.reference.sheet_name))
        return "\n".join(p for p in parts if p)

    # ---------------- Rules ----------------

    def add_rule(self) -> None:
        file_id, sheet_name = self._default_sheet()
        self.session.add_rule(
            self.tab.file_id,
            RuleItem(reference=CellRef(file_id=file_id, sheet_name=sheet_name, address="")),
        )
        self.rebuild()

    def remove_rule(self, idx: int) -> None:
        self.session.remove_rule(self.tab.file_id, idx)
        if not self.tab.rules:
            self.show_result()
        self.rebuild()

    def add_condition(self, idx: int) -> None:
        rule = self.tab.rules[idx]
        rule.filter_enabled = True
        rule.conditions.append(Condition())
        self.rebuild()

    def remove_condition(self, idx: int, c_idx: int) -> None:
        rule = self.tab.rules[idx]
        if 0 <= c_idx < len(rule.conditions):
            del rule.conditions[c_idx]
        self.rebuild()

    def rebuild(self) -> None:
        self.sheet_combos: List[ttk.Combobox] = []
        for child in self.rules_frame.winfo_children():
            child.destroy()
        for idx, rule in enumerate(self.tab.rules):
            self._build_rule_card(idx, rule)

    def _build_rule_card(self, idx: int, rule: RuleItem) -> None:
        card = ttk.LabelFrame(self.rules_frame, text=f"Rule {idx + 1}", padding=6)
        card.grid(row=idx, column=0, sticky="ew", padx=4, pady=4)
        card.columnconfigure(0, weight=1)

        fields = fields_from_reference(rule.reference)
        kind = fields["kind"]

        logic_var = tk.StringVar(value=rule.reference.logic)
        sheet_var = tk.StringVar(value=self._sheet_label(rule.reference.file_id, rule.reference.sheet_name))
        kind_var = tk.StringVar(value=_KIND_TO_LABEL[kind])
        ref_var = tk.StringVar(value=fields["ref_text"])
        start_var = tk.StringVar(value=fields["start_row"])
        end_var = tk.StringVar(value=fields["end_row"])
        value_var = tk.StringVar(value=fields["value"])
        desc_var = tk.StringVar(value=fields["description"])
        filter_var = tk.BooleanVar(value=rule.filter_enabled)

        line = ttk.Frame(card)
        line.grid(row=0, column=0, sticky="ew")

        col = 0
        if idx > 0:
            logic_combo = ttk.Combobox(line, textvariable=logic_var, values=["AND", "OR"], state="readonly", width=5)
            logic_combo.grid(row=0, column=col, padx=(0, 6))
            add_tooltip(logic_combo, "AND: keep narrowing the rows left by the rules above.\n"
                                     "OR: start again from the full sheet.")
            col += 1

        choices = self.sheet_choices()
        sheet_combo = ttk.Combobox(
            line, textvariable=sheet_var, values=[c[0] for c in choices],
            state="readonly", width=26,
        )
        sheet_combo.grid(row=0, column=col, padx=(0, 6))
        self.sheet_combos.append(sheet_combo)
        col += 1

        kind_combo = ttk.Combobox(
            line, textvariable=kind_var, values=[label for _, label in KIND_LABELS],
            state="readonly", width=13,
        )
        kind_combo.grid(row=0, column=col, padx=(0, 6))
        col += 1

        if kind != "custom":
            ref_entry = ttk.Entry(line, textvariable=ref_var, width=8)
            ref_entry.grid(row=0, column=col, padx=(0, 6))
            add_tooltip(ref_entry, lambda: self._rule_hint(rule, _REF_HINTS[kind]))
            col += 1
        else:
            ttk.Label(line, text="Note:").grid(row=0, column=col)
            ttk.Entry(line, textvariable=desc_var, width=16).grid(row=0, column=col + 1, padx=(4, 6))
            ttk.Label(line, text="Value:").grid(row=0, column=col + 2)
            ttk.Entry(line, textvariable=value_var, width=10).grid(row=0, column=col + 3, padx=(4, 6))
            col += 4

        if kind == "column":
            ttk.Label(line, text="Rows").grid(row=0, column=col)
            ttk.Entry(line, textvariable=start_var, width=6).grid(row=0, column=col + 1, padx=(4, 2))
            ttk.Label(line, text="~").grid(row=0, column=col + 2)
            end_entry = ttk.Entry(line, textvariable=end_var, width=6)
            end_entry.grid(row=0, column=col + 3, padx=(2, 6))
            add_tooltip(end_entry, "Leave blank to sum down to the last filled cell.")
            col += 4

        ttk.Button(line, text="X", width=3, command=lambda i=idx: self.remove_rule(i)).grid(row=0, column=col, padx=(6, 0))

        def push(*_):
            label = sheet_var.get()
            file_id, sheet_name = rule.reference.file_id, rule.reference.sheet_name
            for c_label, fid, name in choices:
                if c_label == label:
                    file_id, sheet_name = fid, name
                    break
            rule.reference = reference_from_fields(
                _LABEL_TO_KIND.get(kind_var.get(), "cell"),
                file_id,
                sheet_name,
                logic_var.get(),
                ref_text=ref_var.get(),
                start_row=start_var.get(),
                end_row=end_var.get(),
                value=value_var.get(),
                description=desc_var.get(),
            )

        def _cap_ref(*_):
            v = ref_var.get()
            if v != v.upper():
                ref_var.set(v.upper())

        def _on_kind_change(*_):
            push()
            self.after_idle(self.rebuild)

        for var in (logic_var, sheet_var, ref_var, start_var, end_var, value_var, desc_var):
            var.trace_add("write", push)
        ref_var.trace_add("write", _cap_ref)
        # used-sheet marks follow the selection
        sheet_var.trace_add("write", lambda *_: self.after_idle(self.rebuild))
        kind_combo.bind("<<ComboboxSelected>>", _on_kind_change)

        # Filters
        filter_line = ttk.Frame(card)
        filter_line.grid(row=1, column=0, sticky="ew", pady=(6, 0))

        def _toggle_filter(*_):
            rule.filter_enabled = filter_var.get()
            self.after_idle(self.rebuild)

        ttk.Checkbutton(
            filter_line, text="Filter rows", variable=filter_var, command=_toggle_filter,
        ).grid(row=0, column=0, sticky="w")
        if rule.filter_enabled:
            ttk.Label(filter_line, text=f"{len(rule.conditions)} condition(s)").grid(row=0, column=1, padx=(8, 0))
            ttk.Button(
                filter_line, text="+ Condition", command=lambda i=idx: self.add_condition(i),
            ).grid(row=0, column=2, padx=(8, 0))

            for c_idx, cond in enumerate(rule.conditions):
                is_last = c_idx == len(rule.conditions) - 1
                self._build_condition_row(card, idx, c_idx, cond, is_last)

    def _build_condition_row(self, card, idx: int, c_idx: int, cond: Condition, is_last: bool) -> None:
        row = ttk.Frame(card)
        row.grid(row=2 + c_idx, column=0, sticky="ew", padx=(20, 0), pady=2)

        mode_var = tk.StringVar(value=_MODE_TO_LABEL.get(cond.mode, _MODE_TO_LABEL["exclude"]))
        col_var = tk.StringVar(value=cond.column)
        kw_var = tk.StringVar(value=cond.keyword)
        logic_var = tk.StringVar(value=cond.logic)

        ttk.Label(row, text=f"{c_idx + 1}.").grid(row=0, column=0)
        ttk.Combobox(
            row, textvariable=mode_var, values=[label for _, label in MODE_LABELS],
            state="readonly", width=20,
        ).grid(row=0, column=1, padx=(4, 0))
        ttk.Label(row, text="Column").grid(row=0, column=2, padx=(6, 0))
        col_entry = ttk.Entry(row, textvariable=col_var, width=5)
        col_entry.grid(row=0, column=3, padx=(4, 0))
        add_tooltip(col_entry, lambda: self._rule_hint(self.tab.rules[idx]) if idx < len(self.tab.rules) else "")
        ttk.Label(row, text="Keyword").grid(row=0, column=4, padx=(6, 0))
        ttk.Entry(row, textvariable=kw_var, width=16).grid(row=0, column=5, padx=(4, 0))
        # The connector only links to a following condition; the last one has none.
        if not is_last:
            ttk.Combobox(
                row, textvariable=logic_var, values=["AND", "OR"], state="readonly", width=5,
            ).grid(row=0, column=6, padx=(6, 0))
        ttk.Button(
            row, text="X", width=3, command=lambda: self.remove_condition(idx, c_idx),
        ).grid(row=0, column=7, padx=(6, 0))

        def push(*_):
            cond.mode = _LABEL_TO_MODE.get(mode_var.get(), "exclude")
            cond.column = col_var.get().strip().upper()
            cond.keyword = kw_var.get()
            cond.logic = "OR" if logic_var.get() == "OR" else "AND"

        def _cap_col(*_):
            v = col_var.get()
            if v != v.upper():
                col_var.set(v.upper())

        for var in (mode_var, col_var, kw_var, logic_var):
            var.trace_add("write", push)
        col_var.trace_add("write", _cap_col)

    # ---------------- Result ----------------

    def show_result(self) -> None:
        value = self.tab.result
        if value == 0:
            self.result_var.set("Press Calculate to start")
            self.result_label.configure(foreground="#888888", font=("Segoe UI", 14))
            self.copy_button.state(["disabled"])
            return
        self.result_var.set(format_result(value))
        self.result_label.configure(
            foreground="#1f76ff" if value >= 0 else "#cf1322",
            font=("Segoe UI", 28, "bold"),
        )
        self.copy_button.state(["!disabled"])

    def copy_result(self) -> None:
        if self.tab.result == 0:
            return
        self.clipboard_clear()
        self.clipboard_append(f"{self.tab.result:.2f}")

    def commit_result_name(self) -> None:
        name = self.result_name_var.get().strip()
        if name == self.tab.result_name:
            return
        self._on_rename(self.tab.file_id, name)
