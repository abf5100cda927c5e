"""Input loop of the interactive browser.

Keys are first mapped to an :class:`Intent` according to the current mode,
then :func:`dispatch` hands the intent to the matching
:class:`~pocketledger.session.SessionModel` transition. The loop itself holds
no ledger logic.
"""
from __future__ import annotations

import curses
from datetime import date
from enum import Enum, auto
from typing import Callable

from .logging_setup import get_logger
from .session import Normal, SessionModel
from .store import LedgerStore
from .tui import draw, keypad_mode, temp_cursor

log = get_logger("pocketledger.loop")

ESCAPE = 27
ENTER_KEYS = {curses.KEY_ENTER, 10, 13, "\n", "\r"}
BACKSPACE_KEYS = {curses.KEY_BACKSPACE, 8, 127, "\b", "\x7f"}
ESCAPE_KEYS = {ESCAPE, "\x1b"}


class Intent(Enum):
    NEXT_MONTH = auto()
    PREV_MONTH = auto()
    NEXT_TRANSACTION = auto()
    PREV_TRANSACTION = auto()
    DELETE = auto()
    BEGIN_ADD = auto()
    BEGIN_UPDATE = auto()
    CANCEL = auto()
    CONFIRM = auto()
    TYPE_CHAR = auto()
    BACKSPACE = auto()
    QUIT = auto()


NORMAL_KEYS = {
    "q": Intent.QUIT,
    "n": Intent.NEXT_MONTH,
    "p": Intent.PREV_MONTH,
    "j": Intent.NEXT_TRANSACTION,
    "k": Intent.PREV_TRANSACTION,
    "d": Intent.DELETE,
    "a": Intent.BEGIN_ADD,
    "u": Intent.BEGIN_UPDATE,
    curses.KEY_RIGHT: Intent.NEXT_MONTH,
    curses.KEY_LEFT: Intent.PREV_MONTH,
    curses.KEY_DOWN: Intent.NEXT_TRANSACTION,
    curses.KEY_UP: Intent.PREV_TRANSACTION,
}


def _as_char(key) -> str | None:
    """Return ``key`` as a one-character string when it is a plain character."""
    if isinstance(key, str):
        return key if len(key) == 1 else None
    if 0 <= key < 256 and key not in (ESCAPE,):
        return chr(key)
    return None


def intent_for_key(mode, key) -> tuple[Intent, str | None] | None:
    """Map a key from ``getch``/``get_wch`` to an intent for ``mode``.

    Returns ``None`` for keys that mean nothing in the current mode.
    """
    if isinstance(mode, Normal):
        char = _as_char(key)
        intent = NORMAL_KEYS.get(char) if char is not None else NORMAL_KEYS.get(key)
        return (intent, None) if intent is not None else None

    if key in ESCAPE_KEYS:
        return Intent.CANCEL, None
    if key in ENTER_KEYS:
        return Intent.CONFIRM, None
    if key in BACKSPACE_KEYS:
        return Intent.BACKSPACE, None
    char = _as_char(key)
    if char is not None and char.isprintable():
        return Intent.TYPE_CHAR, char
    return None


def dispatch(model: SessionModel, intent: Intent, char: str | None = None) -> bool:
    """Apply ``intent`` to ``model``; returns ``False`` once the user quits.

    Intents that do not apply to the current mode are ignored.
    """
    if isinstance(model.mode, Normal):
        if intent is Intent.QUIT:
            return False
        handlers: dict[Intent, Callable[[], None]] = {
            Intent.NEXT_MONTH: model.next_month,
            Intent.PREV_MONTH: model.prev_month,
            Intent.NEXT_TRANSACTION: model.next_transaction,
            Intent.PREV_TRANSACTION: model.prev_transaction,
            Intent.DELETE: model.delete,
            Intent.BEGIN_ADD: model.begin_add,
            Intent.BEGIN_UPDATE: model.begin_update,
        }
    else:
        if intent is Intent.TYPE_CHAR:
            if char:
                model.type_char(char)
            return True
        handlers = {
            Intent.CANCEL: model.cancel,
            Intent.CONFIRM: model.confirm,
            Intent.BACKSPACE: model.backspace,
        }
    handler = handlers.get(intent)
    if handler is not None:
        handler()
    return True


def _read_key(stdscr):
    try:
        return stdscr.get_wch()
    except curses.error:
        return None


def run(stdscr, store: LedgerStore, today: Callable[[], date] = date.today) -> SessionModel:
    """Run the interactive session on ``stdscr`` until the user quits."""

    model = SessionModel(store, today=today)
    log.info("Session started with %d months", len(model.months))
    try:
        curses.set_escdelay(25)
    except (AttributeError, curses.error):  # pragma: no cover - older curses
        pass
    with temp_cursor(0), keypad_mode(stdscr):
        try:
            curses.use_default_colors()
        except curses.error:  # pragma: no cover - terminals without color
            pass
        while True:
            draw(stdscr, model)
            key = _read_key(stdscr)
            if key is None:
                continue
            if key == curses.KEY_RESIZE:
                curses.update_lines_cols()
                stdscr.clearok(True)
                continue
            mapped = intent_for_key(model.mode, key)
            if mapped is None:
                continue
            intent, char = mapped
            if not dispatch(model, intent, char):
                break
    log.info("Session closed")
    return model
