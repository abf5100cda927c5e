"""Transaction records and the parsing helpers for their text fields."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Callable, NamedTuple

from .errors import ParseFailure

DATE_FORMAT = "%Y-%m-%d"


class RepeatUnit(str, Enum):
    DAY = "d"
    WEEK = "w"
    MONTH = "m"
    YEAR = "y"


@dataclass(frozen=True)
class Repeat:
    """Recurrence tag stored with a transaction.

    ``unit`` is ``None`` for transactions that do not repeat. The tag is kept
    round-trip safe but never expanded into further entries.
    """

    count: int = 0
    unit: RepeatUnit | None = None

    def __str__(self) -> str:
        if self.unit is None:
            return "none"
        return f"{self.count}{self.unit.value}"


NO_REPEAT = Repeat()


class MonthKey(NamedTuple):
    """``(year, month)`` pair identifying one backing month file."""

    year: int
    month: int

    @classmethod
    def from_date(cls, d: date) -> "MonthKey":
        return cls(d.year, d.month)

    @classmethod
    def from_label(cls, label: str) -> "MonthKey":
        """Parse a ``YYYY-MM`` catalog label."""
        try:
            year, month = label.split("-")
            key = cls(int(year), int(month))
        except ValueError as exc:
            raise ParseFailure(f"Invalid month label: {label!r}") from exc
        if not 1 <= key.month <= 12:
            raise ParseFailure(f"Invalid month label: {label!r}")
        return key

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(eq=False)
class Transaction:
    """A single dated ledger entry.

    Two transactions are considered the same entry when their date and
    description match; the amount and repeat tag do not take part in
    equality. Ordering is by date only so that sorting a month is stable on
    same-day entries.
    """

    date: date = field(default_factory=date.today)
    amount: Decimal = Decimal("0")
    description: str = ""
    repeat: Repeat = NO_REPEAT

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transaction):
            return NotImplemented
        return self.date == other.date and self.description == other.description

    def __hash__(self) -> int:
        return hash((self.date, self.description))

    def __lt__(self, other: "Transaction") -> bool:
        return self.date < other.date

    @property
    def month_key(self) -> MonthKey:
        return MonthKey.from_date(self.date)

    def __str__(self) -> str:
        return f"{format_date(self.date)}\t{self.amount:>7.2f}\t{self.description}"


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def parse_date(text: str) -> date:
    """Parse a ``YYYY-MM-DD`` string."""
    try:
        return datetime.strptime(text.strip(), DATE_FORMAT).date()
    except ValueError as exc:
        raise ParseFailure(f"Invalid date: {text!r} (expected YYYY-MM-DD)") from exc


def parse_date_or_today(
    text: str | None, today: Callable[[], date] = date.today
) -> date:
    """Return the parsed date, or today's date when ``text`` is empty."""
    if text is None or not text.strip():
        return today()
    return parse_date(text)


def parse_amount(text: str) -> Decimal:
    """Parse a signed decimal amount such as ``-42.50``."""
    try:
        value = Decimal(text.strip())
    except InvalidOperation as exc:
        raise ParseFailure(f"Invalid amount: {text!r}") from exc
    if not value.is_finite():
        raise ParseFailure(f"Invalid amount: {text!r}")
    return value


def parse_repeat(text: str | None) -> Repeat:
    """Parse a repeat tag like ``3d`` or ``none``.

    Anything that does not end in a known unit letter means "no repeat". A
    known unit with a count that is not an integer is rejected.
    """
    if not text:
        return NO_REPEAT
    text = text.strip()
    if not text:
        return NO_REPEAT
    try:
        unit = RepeatUnit(text[-1])
    except ValueError:
        return NO_REPEAT
    try:
        count = int(text[:-1])
    except ValueError as exc:
        raise ParseFailure(f"Invalid repeat tag: {text!r}") from exc
    return Repeat(count, unit)


def sort_transactions(transactions) -> list[Transaction]:
    """Return ``transactions`` ordered by date, keeping file order on ties."""
    return sorted(transactions, key=lambda t: t.date)
