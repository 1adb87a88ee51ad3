"""
gui/tooltip.py — Hover tooltips for Tkinter widgets.

Usage:
    from gui.tooltip import add_tooltip, add_tree_tooltip
    add_tooltip(calc_button, "Evaluate all rules in this tab.")
    add_tree_tooltip(file_tree, lambda item: full_path_of(item))

Text may be a string or a callable returning the text at show time
(empty result means no tooltip). Bindings are added with add="+", so the
widget's own handlers keep working.
"""
from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable, Optional, Union


_DELAY_MS = 500
_BG       = "#ffffe1"
_FG       = "#222222"
_FONT     = ("Segoe UI", 9, "normal")
_WRAP     = 320

TipText = Union[str, Callable[[], str]]


class _Tooltip:

    def __init__(self, widget: tk.Widget, text: TipText) -> None:
        self._widget = widget
        self._text = text
        self._tip_window: Optional[tk.Toplevel] = None
        self._after_id: Optional[str] = None

        widget.bind("<Enter>", self._on_enter, add="+")
        widget.bind("<Leave>", self._on_leave, add="+")
        widget.bind("<ButtonPress>", self._on_leave, add="+")

    def current_text(self) -> str:
        text = self._text() if callable(self._text) else self._text
        return text or ""

    def _on_enter(self, event=None) -> None:
        self._cancel()
        self._after_id = self._widget.after(_DELAY_MS, self._show)

    def _on_leave(self, event=None) -> None:
        self._cancel()
        self._hide()

    def _cancel(self) -> None:
        if self._after_id is not None:
            try:
                self._widget.after_cancel(self._after_id)
            except tk.TclError:
                pass
            self._after_id = None

    def _show(self) -> None:
        self._after_id = None
        text = self.current_text()
        if self._tip_window is not None or not text:
            return
        try:
            x = self._widget.winfo_pointerx() + 12
            y = self._widget.winfo_pointery() + 16
        except tk.TclError:
            return

        tw = tk.Toplevel(self._widget)
        tw.wm_overrideredirect(True)
        tw.wm_geometry(f"+{x}+{y}")
        tk.Label(
            tw,
            text=text,
            justify="left",
            background=_BG,
            foreground=_FG,
            font=_FONT,
            relief="solid",
            borderwidth=1,
            padx=8,
            pady=4,
            wraplength=_WRAP,
        ).pack()
        self._tip_window = tw

    def _hide(self) -> None:
        if self._tip_window is not None:
            try:
                self._tip_window.destroy()
            except tk.TclError:
                pass
            self._tip_window = None


def add_tooltip(widget: Optional[tk.Widget], text: TipText) -> Optional[_Tooltip]:
    """Attach a tooltip. No-op (returns None) for a missing widget or empty text."""
    if widget is None or not text:
        return None
    return _Tooltip(widget, text)


def add_tree_tooltip(tree: ttk.Treeview, text_for_item: Callable[[str], str]) -> Optional[_Tooltip]:
    """Tooltip whose text depends on the Treeview row under the pointer."""

    def _text() -> str:
        try:
            y = tree.winfo_pointery() - tree.winfo_rooty()
        except tk.TclError:
            return ""
        item = tree.identify_row(y)
        return text_for_item(item) if item else ""

    tip = _Tooltip(tree, _text)
    last_row = {"item": ""}

    def _on_motion(event) -> None:
        item = tree.identify_row(event.y)
        if item != last_row["item"]:
            last_row["item"] = item
            tip._on_leave()
            tip._on_enter()

    tree.bind("<Motion>", _on_motion, add="+")
    return tip
