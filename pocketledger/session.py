"""State of the interactive ledger browser and its transitions.

A :class:`SessionModel` holds the month catalog, the selected month's
transactions, both cursors, the current interaction mode and the text typed
so far. The interaction loop owns exactly one instance and calls one
transition per input; after every write the model reloads from the store,
which stays the single source of truth.

The mode is a small tagged union: :class:`Normal`, or :class:`Adding` /
:class:`Updating` carrying the guided-entry step and the draft transaction.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Callable, Union

from .errors import LedgerError, ParseFailure
from .logging_setup import get_logger
from .models import (
    MonthKey,
    Transaction,
    format_date,
    parse_amount,
    parse_date_or_today,
)
from .store import LedgerStore

log = get_logger("pocketledger.session")

ADDED_NOTICE = "Added entry successfully"
UPDATED_NOTICE = "Updated entry successfully"
NOTHING_TO_DELETE = "No entry to delete is selected"
NOTHING_TO_UPDATE = "No entry to update is selected"


class Step(Enum):
    DATE = "Date"
    AMOUNT = "Amount"
    DESCRIPTION = "Description"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Normal:
    pass


@dataclass(frozen=True)
class Adding:
    step: Step
    draft: Transaction


@dataclass(frozen=True)
class Updating:
    step: Step
    draft: Transaction


Mode = Union[Normal, Adding, Updating]

NORMAL = Normal()


def _step_forward(index: int | None, size: int, delta: int) -> int | None:
    if index is None or size == 0:
        return index
    return (index + delta) % size


class SessionModel:
    """In-memory view of the ledger for one interactive session."""

    def __init__(self, store: LedgerStore, today: Callable[[], date] = date.today):
        self.store = store
        self.today = today
        self.months: list[str] = store.list_months()
        self.selected_month_index: int | None = len(self.months) - 1 if self.months else None
        self.transactions: list[Transaction] = []
        self.selected_transaction_index: int | None = None
        self.mode: Mode = NORMAL
        self.input_buffer = ""
        self.show_month_sum()
        self.reload_transactions()

    # -- read surface -----------------------------------------------------

    @property
    def current_month_label(self) -> str | None:
        if self.selected_month_index is None:
            return None
        return self.months[self.selected_month_index]

    @property
    def current_month_key(self) -> MonthKey | None:
        label = self.current_month_label
        return MonthKey.from_label(label) if label is not None else None

    @property
    def selected_transaction(self) -> Transaction | None:
        if self.selected_transaction_index is None:
            return None
        return self.transactions[self.selected_transaction_index]

    @property
    def title(self) -> str:
        if isinstance(self.mode, Adding):
            return "Add"
        if isinstance(self.mode, Updating):
            return "Update"
        return "Info"

    @property
    def prompt(self) -> str:
        """Text for the info line; entry modes prefix the current step."""
        if isinstance(self.mode, (Adding, Updating)):
            return f"{self.mode.step}: {self.input_buffer}"
        return self.input_buffer

    # -- synchronisation with the store -----------------------------------

    def refresh_months(self, prefer: str | None = None) -> None:
        """Re-read the catalog, keeping the selected month by label.

        ``prefer`` is selected when nothing was selected before. If the
        previously selected month has disappeared, the cursor is clamped to
        the end of the new catalog.
        """
        label = self.current_month_label or prefer
        previous = self.selected_month_index
        self.months = self.store.list_months()
        if not self.months:
            self.selected_month_index = None
        elif label in self.months:
            self.selected_month_index = self.months.index(label)
        else:
            self.selected_month_index = min(previous or 0, len(self.months) - 1)

    def reload_transactions(self, keep_cursor: bool = False) -> None:
        """Load the selected month; the cursor is reset unless ``keep_cursor``."""
        key = self.current_month_key
        self.transactions = []
        if key is not None:
            try:
                self.transactions = self.store.load(key)
            except LedgerError as exc:
                log.error("Cannot load %s: %s", key.label, exc)
                self.input_buffer = f"Cannot load {key.label}: {exc}"
        if not self.transactions:
            self.selected_transaction_index = None
        elif keep_cursor and self.selected_transaction_index is not None:
            self.selected_transaction_index = min(
                self.selected_transaction_index, len(self.transactions) - 1
            )
        else:
            self.selected_transaction_index = 0

    def show_month_sum(self) -> None:
        key = self.current_month_key
        if key is None:
            self.input_buffer = ""
            return
        try:
            total = self.store.sum_amounts(key)
        except LedgerError:
            self.input_buffer = ""
            return
        self.input_buffer = f"Sum for current month: {total:.2f}"

    # -- navigation -------------------------------------------------------

    def _move_month(self, delta: int) -> None:
        if self.selected_month_index is None:
            return
        self.selected_month_index = _step_forward(
            self.selected_month_index, len(self.months), delta
        )
        self.show_month_sum()
        self.reload_transactions()

    def next_month(self) -> None:
        self._move_month(1)

    def prev_month(self) -> None:
        self._move_month(-1)

    def next_transaction(self) -> None:
        self.selected_transaction_index = _step_forward(
            self.selected_transaction_index, len(self.transactions), 1
        )

    def prev_transaction(self) -> None:
        self.selected_transaction_index = _step_forward(
            self.selected_transaction_index, len(self.transactions), -1
        )

    # -- deletion ---------------------------------------------------------

    def delete(self) -> None:
        """Delete the selected entry by its position in the sorted month."""
        index = self.selected_transaction_index
        key = self.current_month_key
        if index is None or key is None:
            self.input_buffer = NOTHING_TO_DELETE
            return
        size = len(self.transactions)
        try:
            removed = self.store.delete(key, index)
        except LedgerError as exc:
            log.error("Cannot delete entry %d of %s: %s", index, key.label, exc)
            self.input_buffer = f"Cannot delete entry: {exc}"
            return
        log.info("Deleted %r from %s", removed.description, key.label)
        if size > 1 and index == size - 1:
            self.selected_transaction_index = index - 1
        self.refresh_months()
        self.show_month_sum()
        self.reload_transactions(keep_cursor=True)

    # -- guided entry -----------------------------------------------------

    def begin_add(self) -> None:
        self.mode = Adding(Step.DATE, Transaction(date=self.today()))
        self.input_buffer = ""

    def begin_update(self) -> None:
        txn = self.selected_transaction
        if txn is None:
            self.input_buffer = NOTHING_TO_UPDATE
            return
        self.mode = Updating(Step.DATE, replace(txn))
        self.input_buffer = format_date(txn.date)

    def cancel(self) -> None:
        self.mode = NORMAL
        self.input_buffer = ""

    def type_char(self, char: str) -> None:
        if isinstance(self.mode, Normal):
            return
        self.input_buffer += char

    def backspace(self) -> None:
        if isinstance(self.mode, Normal):
            return
        self.input_buffer = self.input_buffer[:-1]

    def confirm(self) -> None:
        """Advance the guided entry by one step."""
        if isinstance(self.mode, Adding):
            self._confirm_add(self.mode)
        elif isinstance(self.mode, Updating):
            self._confirm_update(self.mode)

    def _abort(self, message: str) -> None:
        self.mode = NORMAL
        self.input_buffer = message

    def _confirm_add(self, mode: Adding) -> None:
        draft = mode.draft
        if mode.step is Step.DATE:
            try:
                when = parse_date_or_today(self.input_buffer, self.today)
            except ParseFailure:
                return
            self.mode = Adding(Step.AMOUNT, replace(draft, date=when))
            self.input_buffer = ""
        elif mode.step is Step.AMOUNT:
            try:
                amount = parse_amount(self.input_buffer)
            except ParseFailure as exc:
                self._abort(str(exc))
                return
            # entered as a positive expense, stored as a negative ledger amount
            self.mode = Adding(Step.DESCRIPTION, replace(draft, amount=-amount))
            self.input_buffer = ""
        else:
            draft = replace(draft, description=self.input_buffer)
            try:
                self.store.add(draft)
            except LedgerError as exc:
                log.error("Cannot add entry: %s", exc)
                self._abort(f"Cannot add entry: {exc}")
                return
            self.mode = NORMAL
            self.refresh_months(prefer=draft.month_key.label)
            self.reload_transactions(keep_cursor=True)
            self.input_buffer = ADDED_NOTICE

    def _confirm_update(self, mode: Updating) -> None:
        draft = mode.draft
        if mode.step is Step.DATE:
            try:
                when = parse_date_or_today(self.input_buffer, self.today)
            except ParseFailure:
                return
            draft = replace(draft, date=when)
            self.mode = Updating(Step.AMOUNT, draft)
            self.input_buffer = str(draft.amount)
        elif mode.step is Step.AMOUNT:
            try:
                amount = parse_amount(self.input_buffer)
            except ParseFailure as exc:
                self._abort(str(exc))
                return
            draft = replace(draft, amount=amount)
            self.mode = Updating(Step.DESCRIPTION, draft)
            self.input_buffer = draft.description
        else:
            draft = replace(draft, description=self.input_buffer)
            index = self.selected_transaction_index
            key = self.current_month_key
            if index is None or key is None:
                self._abort(NOTHING_TO_UPDATE)
                return
            try:
                self.store.update(key, index, draft)
            except LedgerError as exc:
                log.error("Cannot update entry %d of %s: %s", index, key.label, exc)
                self._abort(f"Cannot update entry: {exc}")
                return
            self.mode = NORMAL
            self.refresh_months()
            self.reload_transactions(keep_cursor=True)
            self.input_buffer = UPDATED_NOTICE
