"""JSON-file-backed implementation of PurchaseRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from stockledger.domain.model.purchase import Purchase, PurchaseLine, PurchaseStatus
from stockledger.domain.repository.purchase_repository import PurchaseRepository
from stockledger.infrastructure.persistence.json_file import JsonFile


class JsonPurchaseRepository(PurchaseRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, empty=[])

    # --- PurchaseRepository interface -----------------------------------------

    def get_by_id(self, purchase_id: int) -> Purchase | None:
        for raw in self._file.load():
            if raw["id"] == purchase_id:
                return self._to_domain(raw)
        return None

    def get_by_number(self, number: str) -> Purchase | None:
        for raw in self._file.load():
            if raw["number"].lower() == number.strip().lower():
                return self._to_domain(raw)
        return None

    def save(self, purchase: Purchase) -> None:
        with self._file.locked():
            records = self._file.load()

            if purchase.id is None:
                purchase.id = max((r["id"] for r in records), default=0) + 1

            for i, raw in enumerate(records):
                if raw["id"] == purchase.id:
                    records[i] = self._to_raw(purchase)
                    break
            else:
                records.append(self._to_raw(purchase))

            self._file.persist(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(purchase: Purchase) -> dict:
        return {
            "id": purchase.id,
            "number": purchase.number,
            "supplier": purchase.supplier,
            "status": purchase.status.value,
            "ordered_at": purchase.ordered_at.isoformat(),
            "delivered_at": purchase.delivered_at.isoformat() if purchase.delivered_at else None,
            "lines": [
                {
                    "line_number": line.line_number,
                    "designation": line.designation,
                    "quantity": str(line.quantity),
                    "unit_price": str(line.unit_price),
                    "material_id": line.material_id,
                }
                for line in purchase.lines
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Purchase:
        lines = [
            PurchaseLine(
                line_number=line["line_number"],
                designation=line["designation"],
                quantity=Decimal(line["quantity"]),
                unit_price=Decimal(line["unit_price"]),
                material_id=line.get("material_id"),
            )
            for line in raw["lines"]
        ]
        delivered_at = raw.get("delivered_at")
        return Purchase(
            id=raw["id"],
            number=raw["number"],
            supplier=raw["supplier"],
            lines=lines,
            status=PurchaseStatus(raw["status"]),
            ordered_at=datetime.fromisoformat(raw["ordered_at"]),
            delivered_at=datetime.fromisoformat(delivered_at) if delivered_at else None,
        )
