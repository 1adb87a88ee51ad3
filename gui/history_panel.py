from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
from typing import Callable, List

from core.history import format_entry
from core.models import HistoryEntry


class HistoryPanel(ttk.LabelFrame):
    """
    Newest-first calculation log. Double-click copies the selected value.
    Clearing asks for confirmation, then delegates to on_clear.
    """

    def __init__(self, master, on_clear: Callable[[], None]) -> None:
        super().__init__(master, text="History", padding=8)
        self._on_clear = on_clear
        self.entries: List[HistoryEntry] = []

        self.columnconfigure(0, weight=1)
        self.rowconfigure(1, weight=1)

        top = ttk.Frame(self)
        top.grid(row=0, column=0, columnspan=2, sticky="ew")
        top.columnconfigure(0, weight=1)
        self.count_var = tk.StringVar(value="No calculations yet")
        ttk.Label(top, textvariable=self.count_var).grid(row=0, column=0, sticky="w")
        self.clear_button = ttk.Button(top, text="Clear", command=self.confirm_clear)
        self.clear_button.grid(row=0, column=1, sticky="e")

        self.tree = ttk.Treeview(self, columns=("time", "file"), show="tree headings", selectmode="browse")
        self.tree.heading("#0", text="Result")
        self.tree.heading("time", text="Time")
        self.tree.heading("file", text="File")
        self.tree.column("#0", width=180)
        self.tree.column("time", width=130, stretch=False)
        self.tree.column("file", width=120)
        self.tree.grid(row=1, column=0, sticky="nsew", pady=(6, 0))
        self.tree.bind("<Double-1>", lambda e: self.copy_selected())

        yscroll = ttk.Scrollbar(self, orient="vertical", command=self.tree.yview)
        yscroll.grid(row=1, column=1, sticky="ns", pady=(6, 0))
        self.tree.configure(yscrollcommand=yscroll.set)

        self.show([])

    def show(self, entries: List[HistoryEntry]) -> None:
        self.entries = list(entries)
        for item in self.tree.get_children():
            self.tree.delete(item)
        for entry in self.entries:
            self.tree.insert("", "end", text=format_entry(entry), values=(entry.time, entry.file_name))

        if self.entries:
            self.count_var.set(f"{len(self.entries)} record(s)")
            self.clear_button.state(["!disabled"])
        else:
            self.count_var.set("No calculations yet")
            self.clear_button.state(["disabled"])

    def copy_selected(self) -> None:
        sel = self.tree.selection()
        if not sel:
            return
        idx = self.tree.index(sel[0])
        if 0 <= idx < len(self.entries):
            self.clipboard_clear()
            self.clipboard_append(f"{self.entries[idx].result:.2f}")

    def confirm_clear(self) -> None:
        if not self.entries:
            return
        if messagebox.askyesno("Clear history", "Clear all records? This cannot be undone."):
            self._on_clear()
