"""JSON-file-backed implementation of WorkOrderRepository."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from stockledger.domain.model.work_order import WorkOrder, WorkOrderStatus
from stockledger.domain.repository.work_order_repository import WorkOrderRepository
from stockledger.infrastructure.persistence.json_file import (
    JsonFile,
    decimal_or_none,
    str_or_none,
)


def _dt(raw: str | None) -> datetime | None:
    return datetime.fromisoformat(raw) if raw else None


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class JsonWorkOrderRepository(WorkOrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, empty=[])

    # --- WorkOrderRepository interface ----------------------------------------

    def get_by_id(self, work_order_id: int) -> WorkOrder | None:
        for raw in self._file.load():
            if raw["id"] == work_order_id:
                return self._to_domain(raw)
        return None

    def get_by_number(self, number: str) -> WorkOrder | None:
        for raw in self._file.load():
            if raw["number"].lower() == number.strip().lower():
                return self._to_domain(raw)
        return None

    def save(self, work_order: WorkOrder) -> None:
        with self._file.locked():
            records = self._file.load()

            if work_order.id is None:
                work_order.id = max((r["id"] for r in records), default=0) + 1

            # Upsert: replace if exists, otherwise append
            for i, raw in enumerate(records):
                if raw["id"] == work_order.id:
                    records[i] = self._to_raw(work_order)
                    break
            else:
                records.append(self._to_raw(work_order))

            self._file.persist(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(work_order: WorkOrder) -> dict:
        return {
            "id": work_order.id,
            "number": work_order.number,
            "material_id": work_order.material_id,
            "planned_quantity": str_or_none(work_order.planned_quantity),
            "status": work_order.status.value,
            "created_at": work_order.created_at.isoformat(),
            "started_at": _iso(work_order.started_at),
            "completed_at": _iso(work_order.completed_at),
            "produced_quantity": str_or_none(work_order.produced_quantity),
            "byproduct_quantity": str_or_none(work_order.byproduct_quantity),
            "notes": work_order.notes,
        }

    @staticmethod
    def _to_domain(raw: dict) -> WorkOrder:
        return WorkOrder(
            id=raw["id"],
            number=raw["number"],
            material_id=raw.get("material_id"),
            planned_quantity=decimal_or_none(raw.get("planned_quantity")),
            status=WorkOrderStatus(raw["status"]),
            created_at=datetime.fromisoformat(raw["created_at"]),
            started_at=_dt(raw.get("started_at")),
            completed_at=_dt(raw.get("completed_at")),
            produced_quantity=decimal_or_none(raw.get("produced_quantity")),
            byproduct_quantity=decimal_or_none(raw.get("byproduct_quantity")),
            notes=raw.get("notes", ""),
        )
