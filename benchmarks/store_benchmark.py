import time
import tempfile
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pocketledger.models import MonthKey, Transaction
from pocketledger.session import SessionModel
from pocketledger.store import LedgerStore


def build_month(events_per_day: int):
    start = date(2023, 1, 1)
    txns = []
    for day in range(31):
        for ev in range(events_per_day):
            txns.append(
                Transaction(
                    date=start + timedelta(days=30 - day),
                    amount=Decimal(f"-{ev}.25"),
                    description=f"T{day}-{ev}",
                )
            )
    return txns


def run():
    key = MonthKey(2023, 1)
    with tempfile.TemporaryDirectory() as root:
        store = LedgerStore(root)
        txns = build_month(30)

        start = time.perf_counter()
        store.save(key, txns)
        duration = time.perf_counter() - start
        print(f"Saved {len(txns)} transactions in {duration:.4f}s")

        start = time.perf_counter()
        loaded = store.load(key)
        duration = time.perf_counter() - start
        print(f"Loaded {len(loaded)} transactions in {duration:.4f}s")

        model = SessionModel(store)
        start = time.perf_counter()
        for _ in range(50):
            model.delete()
        duration = time.perf_counter() - start
        print(f"Deleted 50 entries through the session in {duration:.4f}s")


if __name__ == "__main__":
    run()
