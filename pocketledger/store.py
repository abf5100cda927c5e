"""Flat-file storage for ledger transactions, one CSV file per month.

Layout under the storage root::

    <root>/<YYYY>/<MM>.csv

Each file holds a header row followed by one ``date, amount, description,
repeat`` record per transaction, sorted by date. Every write rewrites the
whole month file.
"""
from __future__ import annotations

import csv
from decimal import Decimal
from pathlib import Path
from typing import Iterable

from .errors import IndexOutOfRange, IoFailure, ParseFailure, StorageUnavailable
from .logging_setup import get_logger
from .models import (
    MonthKey,
    Transaction,
    format_date,
    parse_amount,
    parse_date,
    parse_repeat,
    sort_transactions,
)

log = get_logger("pocketledger.store")

HEADER = ["date", "amount", "description", "repeat"]
MONTH_SUFFIX = ".csv"


def parse_row(row: list[str]) -> Transaction:
    """Build a transaction from one CSV record (3 or 4 fields)."""
    fields = [f.strip() for f in row]
    if len(fields) not in (3, 4):
        raise ParseFailure(f"Expected 3 or 4 fields, got {len(fields)}")
    repeat = fields[3] if len(fields) == 4 else ""
    return Transaction(
        date=parse_date(fields[0]),
        amount=parse_amount(fields[1]),
        description=fields[2],
        repeat=parse_repeat(repeat),
    )


def _is_month_label(label: str) -> bool:
    try:
        return MonthKey.from_label(label).label == label
    except ParseFailure:
        return False


def _is_blank(row: list[str]) -> bool:
    return not row or all(not cell.strip() for cell in row)


def _is_header(row: list[str], lineno: int) -> bool:
    return lineno == 1 and row[0].strip().lower() == HEADER[0]


def _has_records(path: Path) -> bool:
    """Whether ``path`` holds anything besides blank lines and the header.

    Unreadable files count as having records so that loading reports them.
    """
    try:
        with path.open(newline="", encoding="utf-8") as f:
            reader = csv.reader(f)
            for row in reader:
                if not _is_blank(row) and not _is_header(row, reader.line_num):
                    return True
    except (OSError, UnicodeDecodeError, csv.Error):
        return True
    return False


def format_row(txn: Transaction) -> list[str]:
    return [format_date(txn.date), str(txn.amount), txn.description, str(txn.repeat)]


class LedgerStore:
    """Reads and writes month files below ``storage_root``."""

    def __init__(self, storage_root: str | Path):
        self.root = Path(storage_root)

    def path_for(self, key: MonthKey) -> Path:
        return self.root / f"{key.year:04d}" / f"{key.month:02d}{MONTH_SUFFIX}"

    def load(self, key: MonthKey) -> list[Transaction]:
        """Return the month's transactions sorted by date.

        A month without a file has no transactions. A malformed record raises
        :class:`ParseFailure` rather than being skipped.
        """
        path = self.path_for(key)
        if not path.is_file():
            return []
        txns: list[Transaction] = []
        try:
            with path.open(newline="", encoding="utf-8") as f:
                reader = csv.reader(f)
                for row in reader:
                    lineno = reader.line_num
                    if _is_blank(row) or _is_header(row, lineno):
                        continue
                    try:
                        txns.append(parse_row(row))
                    except ParseFailure as exc:
                        raise ParseFailure(f"{path}:{lineno}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise ParseFailure(f"{path}: not a UTF-8 text file") from exc
        except OSError as exc:
            raise StorageUnavailable(f"Cannot read {path}: {exc}") from exc
        log.debug("Loaded %d transactions from %s", len(txns), path)
        return sort_transactions(txns)

    def save(self, key: MonthKey, transactions: Iterable[Transaction]) -> None:
        """Sort ``transactions`` and overwrite the month file with them.

        Saving an empty list removes the file so the month leaves the catalog.
        """
        path = self.path_for(key)
        txns = sort_transactions(transactions)
        try:
            if not txns:
                path.unlink(missing_ok=True)
                log.info("Removed empty month file %s", path)
                return
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                writer.writerow(HEADER)
                for txn in txns:
                    writer.writerow(format_row(txn))
        except OSError as exc:
            raise IoFailure(f"Cannot write {path}: {exc}") from exc
        log.info("Wrote %d transactions to %s", len(txns), path)

    def list_months(self) -> list[str]:
        """Return ``YYYY-MM`` labels for every month file with records, ascending.

        Empty or header-only files are left out. A missing or unreadable root
        gives an empty catalog.
        """
        months: list[str] = []
        if not self.root.is_dir():
            return months
        try:
            for year_dir in self.root.iterdir():
                if not year_dir.is_dir():
                    continue
                for month_path in year_dir.iterdir():
                    if month_path.is_dir() or month_path.suffix != MONTH_SUFFIX:
                        continue
                    label = f"{year_dir.name}-{month_path.stem}"
                    if not _is_month_label(label):
                        log.debug("Ignoring stray file %s", month_path)
                        continue
                    if not _has_records(month_path):
                        log.debug("Ignoring empty month file %s", month_path)
                        continue
                    months.append(label)
        except OSError as exc:
            log.warning("Cannot list months under %s: %s", self.root, exc)
            return []
        months.sort()
        return months

    def sum_amounts(self, key: MonthKey) -> Decimal:
        return sum((t.amount for t in self.load(key)), Decimal("0"))

    def add(self, txn: Transaction) -> None:
        key = txn.month_key
        txns = self.load(key)
        txns.append(txn)
        self.save(key, txns)

    def delete(self, key: MonthKey, index: int) -> Transaction:
        """Remove the entry at ``index`` of the month's sorted list."""
        txns = self.load(key)
        if not 0 <= index < len(txns):
            raise IndexOutOfRange(index, len(txns))
        removed = txns.pop(index)
        self.save(key, txns)
        return removed

    def update(self, key: MonthKey, index: int, txn: Transaction) -> None:
        """Replace the entry at ``index`` with ``txn``.

        When ``txn`` is dated in another month it is moved to that month's
        file. The target month is written before the slot is removed, so a
        failed write never drops the entry.
        """
        txns = self.load(key)
        if not 0 <= index < len(txns):
            raise IndexOutOfRange(index, len(txns))
        if txn.month_key == key:
            txns[index] = txn
            self.save(key, txns)
            return
        target = self.load(txn.month_key)
        target.append(txn)
        self.save(txn.month_key, target)
        del txns[index]
        self.save(key, txns)
