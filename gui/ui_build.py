from __future__ import annotations

import tkinter as tk
from tkinter import ttk

from gui.history_panel import HistoryPanel
from gui.tooltip import add_tooltip, add_tree_tooltip

# NOTE: GUI-only module. No business logic here.

def build_ui(app) -> None:
    # Overall layout: top toolbar, then file tree | calculation tabs | history
    app.columnconfigure(0, weight=1)
    app.rowconfigure(0, weight=1)

    root = ttk.Frame(app, padding=8)
    root.grid(row=0, column=0, sticky="nsew")
    root.columnconfigure(0, weight=1, minsize=220)
    root.columnconfigure(1, weight=4, minsize=560)
    root.columnconfigure(2, weight=2, minsize=300)
    root.rowconfigure(1, weight=1)

    # Apply theme + styles FIRST so all widgets pick them up correctly
    try:
        style = ttk.Style()
        if style.theme_use() != "clam":
            style.theme_use("clam")
        style.configure("RunAccent.TButton", padding=(16, 6))
        style.map(
            "RunAccent.TButton",
            background=[("active", "#1e6bd6"), ("!disabled", "#1f76ff")],
            foreground=[("!disabled", "white")],
        )
    except tk.TclError:
        pass

    # ----- TOP TOOLBAR -----
    topbar = ttk.Frame(root)
    topbar.grid(row=0, column=0, columnspan=3, sticky="ew", pady=(0, 8))
    topbar.columnconfigure(4, weight=1)

    add_btn = ttk.Button(topbar, text="Add Files (XLSX/CSV)", style="RunAccent.TButton", command=app.add_files)
    add_btn.grid(row=0, column=0, padx=(0, 6))
    add_tooltip(add_btn, "Load up to 6 spreadsheet files.")
    ttk.Button(topbar, text="Remove File", command=app.remove_selected_file).grid(row=0, column=1, padx=(0, 6))
    ttk.Button(topbar, text="Clear All", command=app.clear_files).grid(row=0, column=2, padx=(0, 6))
    ttk.Button(topbar, text="Close Tab", command=app.close_active_tab).grid(row=0, column=3, padx=(0, 6))

    # ----- LEFT: FILE TREE -----
    left = ttk.LabelFrame(root, text="Files", padding=6)
    left.grid(row=1, column=0, sticky="nsew", padx=(0, 10))
    left.columnconfigure(0, weight=1)
    left.rowconfigure(0, weight=1)

    app.tree = ttk.Treeview(left, show="tree", selectmode="browse")
    app.tree.grid(row=0, column=0, sticky="nsew")
    app.tree.bind("<Double-1>", app._on_tree_open)
    app.tree.bind("<Return>", app._on_tree_open)
    add_tree_tooltip(app.tree, app._tree_tooltip_text)

    yscroll = ttk.Scrollbar(left, orient="vertical", command=app.tree.yview)
    yscroll.grid(row=0, column=1, sticky="ns")
    app.tree.configure(yscrollcommand=yscroll.set)

    app.files_count_var = tk.StringVar(value="")
    ttk.Label(left, textvariable=app.files_count_var).grid(row=1, column=0, columnspan=2, sticky="w", pady=(6, 0))

    # ----- CENTER: CALCULATION TABS -----
    center = ttk.Frame(root)
    center.grid(row=1, column=1, sticky="nsew")
    center.columnconfigure(0, weight=1)
    center.rowconfigure(0, weight=1)

    app.notebook = ttk.Notebook(center)
    app.notebook.grid(row=0, column=0, sticky="nsew")
    app.notebook.bind("<<NotebookTabChanged>>", app._on_tab_changed)

    app.empty_label = ttk.Label(
        center,
        text="Double-click a file on the left to start calculating.",
        anchor="center",
    )
    app.empty_label.grid(row=0, column=0, sticky="nsew")

    # ----- RIGHT: HISTORY -----
    app.history_panel = HistoryPanel(root, on_clear=app.clear_history)
    app.history_panel.grid(row=1, column=2, sticky="nsew", padx=(10, 0))

    # ----- BOTTOM: STATUS -----
    app.status_var = tk.StringVar(value="Idle")
    ttk.Label(root, textvariable=app.status_var).grid(row=2, column=0, columnspan=3, sticky="w", pady=(8, 0))
