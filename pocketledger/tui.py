"""Curses rendering of a :class:`~pocketledger.session.SessionModel`.

The screen is split into a month list on the left, the selected month's
transactions on the right and a one-line info box underneath them. Drawing
only reads the model; all state changes happen in the session.
"""
from __future__ import annotations

import curses
from contextlib import contextmanager

from .models import Transaction, format_date
from .session import Adding, SessionModel, Updating

MONTHS_WIDTH_PCT = 20
INFO_HEIGHT = 3
COLUMN_PCTS = (20, 10, 70)
COLUMN_TITLES = ("Date", "Amount", "Description")


@contextmanager
def temp_cursor(state: int):
    """Temporarily set cursor visibility and restore on exit."""

    prev = None
    try:
        prev = curses.curs_set(state)
    except curses.error:  # pragma: no cover - some terminals
        prev = None
    try:
        yield
    finally:
        if prev is not None:
            try:
                curses.curs_set(prev)
            except curses.error:  # pragma: no cover - cleanup best effort
                pass


@contextmanager
def keypad_mode(win):
    """Enable keypad mode and ensure it is disabled afterwards."""

    try:
        win.keypad(True)
    except curses.error:  # pragma: no cover - fake windows
        pass
    try:
        yield
    finally:
        try:
            win.keypad(False)
        except curses.error:  # pragma: no cover - fake windows
            pass


def _addnstr(win, y: int, x: int, text: str, n: int, attr: int = 0) -> None:
    if n <= 0:
        return
    try:
        win.addnstr(y, x, text, n, attr)
    except curses.error:
        pass


def scroll_top(index: int | None, count: int, visible: int) -> int:
    """First row to show so that ``index`` stays near the middle."""
    if index is None or visible <= 0:
        return 0
    return min(max(0, index - visible // 2), max(0, count - visible))


def column_widths(width: int) -> tuple[int, ...]:
    widths = [max(1, width * pct // 100) for pct in COLUMN_PCTS]
    widths[-1] = max(1, width - sum(widths[:-1]))
    return tuple(widths)


def format_row(cells, widths) -> str:
    return "".join(f"{cell:<{w}.{w}}" for cell, w in zip(cells, widths))


def transaction_cells(txn: Transaction) -> tuple[str, str, str]:
    return format_date(txn.date), f"{txn.amount:.2f}", txn.description


def info_cursor(model: SessionModel) -> int | None:
    """Column of the text cursor inside the info box, ``None`` in Normal mode."""
    if isinstance(model.mode, (Adding, Updating)):
        return len(model.prompt)
    return None


def _boxed(height: int, width: int, y: int, x: int, title: str):
    win = curses.newwin(max(1, height), max(1, width), y, x)
    try:
        win.box()
    except curses.error:  # pragma: no cover - tiny terminals
        pass
    _addnstr(win, 0, 2, f" {title} ", width - 4)
    return win


def _draw_list(win, rows, selected: int | None, height: int, width: int, top_offset: int = 0):
    visible = max(0, height - 2 - top_offset)
    top = scroll_top(selected, len(rows), visible)
    for i in range(visible):
        idx = top + i
        if idx >= len(rows):
            break
        attr = curses.A_REVERSE | curses.A_BOLD if idx == selected else curses.A_NORMAL
        _addnstr(win, 1 + top_offset + i, 1, rows[idx], width - 2, attr)


def draw(stdscr, model: SessionModel) -> None:
    """Redraw the whole screen from ``model``."""

    h, w = stdscr.getmaxyx()
    h = max(INFO_HEIGHT + 3, h)
    w = max(10, w)
    left_w = max(1, w * MONTHS_WIDTH_PCT // 100)
    right_w = max(1, w - left_w)
    detail_h = max(3, h - INFO_HEIGHT)

    try:
        stdscr.erase()
        stdscr.noutrefresh()
    except curses.error:  # pragma: no cover - fake windows
        pass

    months_win = _boxed(h, left_w, 0, 0, "Months")
    _draw_list(months_win, model.months, model.selected_month_index, h, left_w)

    detail_win = _boxed(detail_h, right_w, 0, left_w, "Detail")
    widths = column_widths(right_w - 2)
    _addnstr(detail_win, 1, 1, format_row(COLUMN_TITLES, widths), right_w - 2, curses.A_BOLD)
    rows = [format_row(transaction_cells(t), widths) for t in model.transactions]
    _draw_list(
        detail_win, rows, model.selected_transaction_index, detail_h, right_w, top_offset=1
    )

    info_win = _boxed(INFO_HEIGHT, right_w, detail_h, left_w, model.title)
    _addnstr(info_win, 1, 1, model.prompt, right_w - 2)

    cursor_x = info_cursor(model)
    for win in (months_win, detail_win, info_win):
        try:
            win.noutrefresh()
        except curses.error:  # pragma: no cover - fake windows
            pass
    try:
        if cursor_x is None:
            curses.curs_set(0)
        else:
            curses.curs_set(1)
            info_win.move(1, min(1 + cursor_x, right_w - 2))
            info_win.noutrefresh()
        curses.doupdate()
    except curses.error:
        pass
