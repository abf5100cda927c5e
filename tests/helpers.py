import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Ensure the project root is on the Python path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from pocketledger.models import Transaction
from pocketledger.store import LedgerStore

TODAY = date(2024, 3, 15)


def fixed_today() -> date:
    return TODAY


def txn(day: str, amount: str, description: str, **kwargs) -> Transaction:
    return Transaction(
        date=date.fromisoformat(day),
        amount=Decimal(amount),
        description=description,
        **kwargs,
    )


def seed(store: LedgerStore, *txns: Transaction) -> None:
    for t in txns:
        store.add(t)


def snapshot(txns):
    """Comparable view of transactions including amount and repeat."""
    return [(t.date, t.amount, t.description, t.repeat) for t in txns]


def type_text(model, text: str) -> None:
    for ch in text:
        model.type_char(ch)


def clear_buffer(model) -> None:
    for _ in range(len(model.input_buffer)):
        model.backspace()


@pytest.fixture
def store(tmp_path):
    """A store rooted in a not yet existing directory under ``tmp_path``."""
    return LedgerStore(tmp_path / "ledger")


def make_prompt(responses):
    iterator = iter(responses)

    def _prompt(*args, **kwargs):
        return next(iterator)

    return _prompt
