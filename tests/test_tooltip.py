"""
test_tooltip.py — Unit tests for gui/tooltip.py.

Tests:
  - add_tooltip attaches bindings without error
  - Tooltip shows on simulated enter, hides on leave
  - add_tooltip with None widget is a safe no-op
  - add_tooltip with empty text is a safe no-op
  - Callable text is evaluated at show time
  - Tree tooltip attaches to a Treeview
"""
from __future__ import annotations

import pytest

try:
    import tkinter as tk
    _root = tk.Tk()
    tk.Frame(_root)
    _root.destroy()
    _TCL_OK = True
except Exception:
    _TCL_OK = False

pytestmark = pytest.mark.skipif(not _TCL_OK, reason="Tcl/Tk not available")

from gui.tooltip import add_tooltip, add_tree_tooltip, _Tooltip


def test_add_tooltip_attaches_without_error():
    root = tk.Tk()
    btn = tk.Button(root, text="Test")
    btn.pack()
    assert add_tooltip(btn, "Hello tooltip") is not None
    root.update_idletasks()
    root.destroy()


def test_tooltip_none_widget_no_crash():
    """add_tooltip(None, ...) must not raise."""
    assert add_tooltip(None, "some text") is None


def test_tooltip_empty_text_no_crash():
    """add_tooltip(widget, '') must not raise or attach."""
    root = tk.Tk()
    btn = tk.Button(root, text="Test")
    btn.pack()
    assert add_tooltip(btn, "") is None
    root.update_idletasks()
    root.destroy()


def test_tooltip_show_and_hide():
    root = tk.Tk()
    btn = tk.Button(root, text="Hover me")
    btn.pack()
    root.update_idletasks()

    tip = _Tooltip(btn, "Test tip")
    tip._show()
    root.update_idletasks()
    assert tip._tip_window is not None

    tip._on_leave()
    root.update_idletasks()
    assert tip._tip_window is None

    root.destroy()


def test_callable_text_evaluated_at_show_time():
    root = tk.Tk()
    btn = tk.Button(root, text="B")
    btn.pack()
    state = {"text": ""}
    tip = _Tooltip(btn, lambda: state["text"])

    tip._show()
    assert tip._tip_window is None

    state["text"] = "now"
    assert tip.current_text() == "now"
    tip._show()
    assert tip._tip_window is not None

    root.destroy()


def test_enter_then_leave_cancels_pending_show():
    root = tk.Tk()
    btn = tk.Button(root, text="B")
    btn.pack()
    tip = _Tooltip(btn, "tip")
    tip._on_enter()
    assert tip._after_id is not None
    tip._on_leave()
    assert tip._after_id is None
    root.destroy()


def test_tree_tooltip_attaches():
    from tkinter import ttk
    root = tk.Tk()
    tree = ttk.Treeview(root)
    tree.insert("", "end", text="row")
    tree.pack()
    assert add_tree_tooltip(tree, lambda item: f"path of {item}") is not None
    root.update_idletasks()
    root.destroy()
