"""JSON-file-backed implementation of LedgerRepository.

Movements and balances live in the same document so one atomic file
replacement commits both.  Each write loads, checks versions and persists
while holding the file lock, so a writer in another process that read a
balance before this one changed it gets a ConcurrencyConflictError
instead of silently overwriting the change.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Sequence

from stockledger.domain.exceptions import ConcurrencyConflictError
from stockledger.domain.model.balance import StockBalance
from stockledger.domain.model.movement import MovementKind, StockMovement
from stockledger.domain.repository.ledger_repository import LedgerRepository
from stockledger.infrastructure.persistence.json_file import JsonFile


class JsonLedgerRepository(LedgerRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, empty={"movements": [], "balances": []})
        self._lock = threading.Lock()

    # --- Balances -------------------------------------------------------------

    def get_balance(self, material_id: str) -> StockBalance | None:
        for raw in self._file.load()["balances"]:
            if raw["material_id"] == material_id:
                return self._balance_to_domain(raw)
        return None

    def list_balances(self) -> list[StockBalance]:
        return [self._balance_to_domain(raw) for raw in self._file.load()["balances"]]

    def save_balance(self, balance: StockBalance) -> None:
        with self._lock, self._file.locked():
            document = self._file.load()
            self._put_balance(document, balance)
            self._file.persist(document)

    # --- Movements ------------------------------------------------------------

    def commit(
        self,
        movements: Sequence[StockMovement],
        balances: Sequence[StockBalance],
    ) -> list[StockMovement]:
        with self._lock, self._file.locked():
            document = self._file.load()
            for balance in balances:
                self._put_balance(document, balance)

            next_id = max((raw["id"] for raw in document["movements"]), default=0) + 1
            stored: list[StockMovement] = []
            for movement in movements:
                persisted = replace(movement, id=next_id)
                next_id += 1
                document["movements"].append(self._movement_to_raw(persisted))
                stored.append(persisted)

            self._file.persist(document)
        return stored

    def movements_for(self, material_id: str) -> list[StockMovement]:
        movements = [
            self._movement_to_domain(raw)
            for raw in self._file.load()["movements"]
            if raw["material_id"] == material_id
        ]
        return sorted(movements, key=lambda m: m.sort_key)

    def history(
        self, material_id: str, limit: int, offset: int = 0
    ) -> list[StockMovement]:
        newest_first = list(reversed(self.movements_for(material_id)))
        return newest_first[offset : offset + limit]

    def movements_by_reference(self, source_reference: str) -> list[StockMovement]:
        movements = [
            self._movement_to_domain(raw)
            for raw in self._file.load()["movements"]
            if raw.get("source_reference") == source_reference
        ]
        return sorted(movements, key=lambda m: m.sort_key)

    # --- Internal helpers -----------------------------------------------------

    def _put_balance(self, document: dict, balance: StockBalance) -> None:
        """Upsert *balance* into the in-memory document, checking its version."""
        records = document["balances"]
        for i, raw in enumerate(records):
            if raw["material_id"] == balance.material_id:
                self._check_version(balance, raw["version"])
                records[i] = self._balance_to_raw(balance)
                return
        self._check_version(balance, -1)
        records.append(self._balance_to_raw(balance))

    @staticmethod
    def _check_version(balance: StockBalance, stored_version: int) -> None:
        if balance.version != stored_version + 1:
            raise ConcurrencyConflictError(
                balance.material_id,
                expected=balance.version - 1,
                actual=stored_version,
            )

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _balance_to_raw(balance: StockBalance) -> dict:
        return {
            "material_id": balance.material_id,
            "on_hand": str(balance.on_hand),
            "reserved": str(balance.reserved),
            "weighted_average_cost": str(balance.weighted_average_cost),
            "version": balance.version,
            "updated_at": balance.updated_at.isoformat() if balance.updated_at else None,
        }

    @staticmethod
    def _balance_to_domain(raw: dict) -> StockBalance:
        updated_at = raw.get("updated_at")
        return StockBalance(
            material_id=raw["material_id"],
            on_hand=Decimal(raw["on_hand"]),
            reserved=Decimal(raw["reserved"]),
            weighted_average_cost=Decimal(raw["weighted_average_cost"]),
            version=raw["version"],
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )

    @staticmethod
    def _movement_to_raw(movement: StockMovement) -> dict:
        return {
            "id": movement.id,
            "material_id": movement.material_id,
            "kind": movement.kind.value,
            "quantity": str(movement.quantity),
            "unit_cost": str(movement.unit_cost),
            "movement_value": str(movement.movement_value),
            "source_reference": movement.source_reference,
            "comment": movement.comment,
            "source_line": movement.source_line,
            "recorded_at": movement.recorded_at.isoformat(),
        }

    @staticmethod
    def _movement_to_domain(raw: dict) -> StockMovement:
        return StockMovement(
            id=raw["id"],
            material_id=raw["material_id"],
            kind=MovementKind(raw["kind"]),
            quantity=Decimal(raw["quantity"]),
            unit_cost=Decimal(raw["unit_cost"]),
            movement_value=Decimal(raw["movement_value"]),
            recorded_at=datetime.fromisoformat(raw["recorded_at"]),
            source_reference=raw.get("source_reference", ""),
            comment=raw.get("comment", ""),
            source_line=raw.get("source_line"),
        )
