"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the JSON repositories
but keep everything in dicts. No file I/O, no side effects.

Like the JSON repositories, the ledger fake hands out copies: mutating a
balance you got from ``get_balance`` changes nothing until it is saved
or committed.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Sequence

from stockledger.domain.exceptions import ConcurrencyConflictError
from stockledger.domain.model.balance import StockBalance
from stockledger.domain.model.material import Material
from stockledger.domain.model.movement import StockMovement
from stockledger.domain.model.purchase import Purchase
from stockledger.domain.model.work_order import WorkOrder
from stockledger.domain.repository.ledger_repository import LedgerRepository
from stockledger.domain.repository.material_repository import MaterialRepository
from stockledger.domain.repository.purchase_repository import PurchaseRepository
from stockledger.domain.repository.work_order_repository import WorkOrderRepository


class FakeMaterialRepository(MaterialRepository):

    def __init__(self, materials: list[Material] | None = None) -> None:
        self._store: dict[str, Material] = {}
        for m in materials or []:
            self._store[m.id] = m

    def get_by_id(self, material_id: str) -> Material | None:
        return self._store.get(material_id)

    def get_by_code(self, code: str) -> Material | None:
        for m in self._store.values():
            if m.code.lower() == code.strip().lower():
                return m
        return None

    def list_all(self) -> list[Material]:
        return list(self._store.values())

    def save(self, material: Material) -> None:
        self._store[material.id] = material


class FakeLedgerRepository(LedgerRepository):

    def __init__(self) -> None:
        self._balances: dict[str, StockBalance] = {}
        self._movements: list[StockMovement] = []
        self._lock = threading.Lock()
        self.commit_count = 0
        self.fail_next_commit: Exception | None = None

    def get_balance(self, material_id: str) -> StockBalance | None:
        balance = self._balances.get(material_id)
        return replace(balance) if balance is not None else None

    def list_balances(self) -> list[StockBalance]:
        return [replace(b) for b in self._balances.values()]

    def save_balance(self, balance: StockBalance) -> None:
        with self._lock:
            self._check_version(balance)
            self._balances[balance.material_id] = replace(balance)

    def commit(
        self,
        movements: Sequence[StockMovement],
        balances: Sequence[StockBalance],
    ) -> list[StockMovement]:
        with self._lock:
            if self.fail_next_commit is not None:
                exc, self.fail_next_commit = self.fail_next_commit, None
                raise exc
            for balance in balances:
                self._check_version(balance)
            stored = [
                replace(m, id=len(self._movements) + i + 1)
                for i, m in enumerate(movements)
            ]
            self._movements.extend(stored)
            for balance in balances:
                self._balances[balance.material_id] = replace(balance)
            self.commit_count += 1
            return stored

    def movements_for(self, material_id: str) -> list[StockMovement]:
        return sorted(
            (m for m in self._movements if m.material_id == material_id),
            key=lambda m: m.sort_key,
        )

    def history(
        self, material_id: str, limit: int, offset: int = 0
    ) -> list[StockMovement]:
        newest_first = list(reversed(self.movements_for(material_id)))
        return newest_first[offset : offset + limit]

    def movements_by_reference(self, source_reference: str) -> list[StockMovement]:
        return sorted(
            (m for m in self._movements if m.source_reference == source_reference),
            key=lambda m: m.sort_key,
        )

    # --- Test helpers ---------------------------------------------------------

    @property
    def all_movements(self) -> list[StockMovement]:
        return list(self._movements)

    def corrupt_balance(self, material_id: str, **changes) -> None:
        """Change a stored balance behind the ledger's back."""
        self._balances[material_id] = replace(self._balances[material_id], **changes)

    def _check_version(self, balance: StockBalance) -> None:
        stored = self._balances.get(balance.material_id)
        stored_version = stored.version if stored is not None else -1
        if balance.version != stored_version + 1:
            raise ConcurrencyConflictError(
                balance.material_id, expected=balance.version - 1, actual=stored_version
            )


class FakeWorkOrderRepository(WorkOrderRepository):

    def __init__(self) -> None:
        self._store: dict[int, WorkOrder] = {}
        self._next_id = 1
        self.fail_next_save: Exception | None = None

    def get_by_id(self, work_order_id: int) -> WorkOrder | None:
        work_order = self._store.get(work_order_id)
        return replace(work_order) if work_order is not None else None

    def get_by_number(self, number: str) -> WorkOrder | None:
        for work_order in self._store.values():
            if work_order.number.lower() == number.strip().lower():
                return replace(work_order)
        return None

    def save(self, work_order: WorkOrder) -> None:
        self._maybe_fail()
        if work_order.id is None:
            work_order.id = self._next_id
            self._next_id += 1
        self._store[work_order.id] = replace(work_order)

    def _maybe_fail(self) -> None:
        if self.fail_next_save is not None:
            exc, self.fail_next_save = self.fail_next_save, None
            raise exc


class FakePurchaseRepository(PurchaseRepository):

    def __init__(self) -> None:
        self._store: dict[int, Purchase] = {}
        self._next_id = 1
        self.fail_next_save: Exception | None = None

    def get_by_id(self, purchase_id: int) -> Purchase | None:
        purchase = self._store.get(purchase_id)
        return replace(purchase, lines=list(purchase.lines)) if purchase is not None else None

    def get_by_number(self, number: str) -> Purchase | None:
        for purchase in self._store.values():
            if purchase.number.lower() == number.strip().lower():
                return replace(purchase, lines=list(purchase.lines))
        return None

    def save(self, purchase: Purchase) -> None:
        self._maybe_fail()
        if purchase.id is None:
            purchase.id = self._next_id
            self._next_id += 1
        self._store[purchase.id] = replace(purchase, lines=list(purchase.lines))

    def _maybe_fail(self) -> None:
        if self.fail_next_save is not None:
            exc, self.fail_next_save = self.fail_next_save, None
            raise exc


class StepClock:
    """Deterministic clock: each call is one second after the previous one."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now
