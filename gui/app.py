from __future__ import annotations

import logging
import tkinter as tk
from tkinter import messagebox, filedialog
from typing import Dict, Iterable, Optional, Tuple

from gui.rule_builder import RuleBuilder
from gui.ui_build import build_ui

from core.engine import describe_process, format_result
from core.errors import AppError, friendly_message
from core.history import HistoryStore
from core.log import configure_logging
from core.pool import FilePool
from core.session import CalcTab, Session


logger = logging.getLogger(__name__)


class SheetTallyApp(tk.Tk):
    """
    Main window: loaded files on the left, one calculation tab per file in the
    middle, the rolling history on the right.

    Session is the single source of truth; widgets only mirror it.
    """

    def __init__(self, session: Optional[Session] = None) -> None:
        super().__init__()
        self.title("Sheet Tally")
        self.minsize(1200, 700)

        self.session: Session = session if session is not None else Session(FilePool(), HistoryStore())
        self.builders: Dict[str, RuleBuilder] = {}
        # tree item id -> (file_id, sheet_name or None for the file node)
        self._tree_items: Dict[str, Tuple[str, Optional[str]]] = {}

        self._build_ui()
        self.refresh_tree()
        self.refresh_history()
        self._sync_empty_state()

        self.protocol("WM_DELETE_WINDOW", self._on_close)

    # ---------------- UI ----------------

    def _build_ui(self) -> None:
        build_ui(self)

    def _on_close(self) -> None:
        self.destroy()

    def _show_error(self, title: str, e: AppError) -> None:
        messagebox.showwarning(title, friendly_message(e))

    def _sync_empty_state(self) -> None:
        if self.builders:
            self.empty_label.grid_remove()
            self.notebook.grid()
        else:
            self.notebook.grid_remove()
            self.empty_label.grid()

    # ---------------- File tree ----------------

    def refresh_tree(self) -> None:
        for item in self.tree.get_children():
            self.tree.delete(item)
        self._tree_items.clear()

        for wb in self.session.pool.files:
            f_id = self.tree.insert("", "end", text=wb.name)
            self._tree_items[f_id] = (wb.file_id, None)
            self.tree.item(f_id, open=True)
            for sheet in wb.sheets:
                s_id = self.tree.insert(f_id, "end", text=f"{sheet.name} ({len(sheet.rows)} rows)")
                self._tree_items[s_id] = (wb.file_id, sheet.name)

        pool = self.session.pool
        self.files_count_var.set(f"{len(pool)} / {pool.max_files} files")

    def _selected_file_id(self) -> Optional[str]:
        sel = self.tree.selection()
        if not sel:
            focused = self.tree.focus()
            if not focused:
                return None
            sel = (focused,)
        entry = self._tree_items.get(sel[0])
        return entry[0] if entry else None

    def _tree_tooltip_text(self, item: str) -> str:
        entry = self._tree_items.get(item)
        if not entry:
            return ""
        wb = self.session.pool.get(entry[0])
        if wb is None:
            return ""
        return wb.path or wb.name

    def _on_tree_open(self, event=None) -> None:
        file_id = self._selected_file_id()
        if file_id:
            self.open_tab(file_id)

    # ---------------- Files ----------------

    def add_files(self) -> None:
        paths = filedialog.askopenfilenames(
            title="Add spreadsheet file(s)",
            filetypes=[("Excel/CSV", "*.xlsx *.xlsm *.csv"), ("All files", "*.*")],
        )
        if not paths:
            return
        self.load_paths(paths)

    def load_paths(self, paths: Iterable[str]) -> None:
        report = self.session.pool.add_paths(paths)
        self.refresh_tree()

        if report.loaded:
            self.status_var.set(f"Loaded {len(report.loaded)} file(s)")
            self._refresh_sheet_choices()
        if report.ok:
            return
        problems = [friendly_message(e) for e in report.errors]
        if report.skipped_over_limit:
            problems.append(
                f"File limit reached: skipped {report.skipped_over_limit} file(s) "
                f"(at most {self.session.pool.max_files})."
            )
        messagebox.showwarning("Add files", "\n".join(problems))

    def remove_selected_file(self) -> None:
        file_id = self._selected_file_id()
        if not file_id:
            messagebox.showinfo("Remove File", "Select a file to remove.")
            return
        self.remove_file(file_id)

    def remove_file(self, file_id: str) -> None:
        self._forget_builder(file_id)
        self.session.remove_file(file_id)
        self.refresh_tree()
        self._refresh_sheet_choices()
        self._select_active_tab()

    def clear_files(self) -> None:
        for file_id in list(self.builders):
            self._forget_builder(file_id)
        self.session.clear_files()
        self.refresh_tree()
        self.status_var.set("Cleared all files")

    # ---------------- Tabs ----------------

    def _tab_text(self, tab: CalcTab) -> str:
        if tab.result:
            return f"{tab.label}  [{format_result(tab.result)}]"
        return tab.label

    def open_tab(self, file_id: str) -> None:
        try:
            tab = self.session.open_tab(file_id)
        except AppError as e:
            self._show_error("Open file", e)
            return

        builder = self.builders.get(file_id)
        if builder is None:
            builder = RuleBuilder(
                self.notebook,
                self.session,
                tab,
                on_calculate=self.calculate,
                on_rename=self.rename_result,
            )
            self.builders[file_id] = builder
            self.notebook.add(builder, text=self._tab_text(tab))
        self._sync_empty_state()
        self.notebook.select(builder)

    def _forget_builder(self, file_id: str) -> None:
        builder = self.builders.pop(file_id, None)
        if builder is not None:
            self.notebook.forget(builder)
            builder.destroy()
        self._sync_empty_state()

    def close_tab(self, file_id: str) -> None:
        self._forget_builder(file_id)
        self.session.close_tab(file_id)
        self._select_active_tab()

    def close_active_tab(self) -> None:
        if self.session.active_key:
            self.close_tab(self.session.active_key)

    def _select_active_tab(self) -> None:
        builder = self.builders.get(self.session.active_key)
        if builder is not None:
            self.notebook.select(builder)

    def _on_tab_changed(self, event=None) -> None:
        current = self.notebook.select()
        for file_id, builder in self.builders.items():
            if str(builder) == current:
                self.session.active_key = file_id
                return

    def _refresh_sheet_choices(self) -> None:
        for builder in self.builders.values():
            builder.rebuild()

    # ---------------- Calculation ----------------

    def calculate(self, file_id: str) -> None:
        tab = self.session.tab(file_id)
        if tab is None:
            return
        try:
            total = self.session.calculate(file_id)
        except AppError as e:
            self._show_error("Calculate", e)
            total = None

        builder = self.builders.get(file_id)
        if builder is not None:
            builder.show_result()
            self.notebook.tab(builder, text=self._tab_text(tab))
        if total is not None:
            self.status_var.set(describe_process(tab.rules, total))
        self.refresh_history()

    def rename_result(self, file_id: str, name: str) -> None:
        try:
            self.session.rename_result(file_id, name)
        except AppError as e:
            self._show_error("Rename result", e)
            return
        self.refresh_history()

    # ---------------- History ----------------

    def refresh_history(self) -> None:
        self.history_panel.show(self.session.history.load())

    def clear_history(self) -> None:
        try:
            self.session.history.clear()
        except AppError as e:
            self._show_error("Clear history", e)
            return
        self.refresh_history()


def main() -> None:
    configure_logging()
    app = SheetTallyApp()
    app.mainloop()


if __name__ == "__main__":
    main()
