"""Application service: Add Material use case.

A material and its zeroed stock balance are created together, so the
ledger can accept movements for it straight away.
"""

from __future__ import annotations

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.material import Material
from stockledger.domain.model.value_objects import to_decimal
from stockledger.domain.repository.material_repository import MaterialRepository
from stockledger.domain.service.stock_ledger import StockLedger


class AddMaterialHandler:

    def __init__(self, material_repo: MaterialRepository, ledger: StockLedger) -> None:
        self._material_repo = material_repo
        self._ledger = ledger

    def handle(
        self,
        code: str,
        designation: str,
        unit: str,
        alert_threshold: str | None = None,
    ) -> Material:
        """Add a new material to the catalog and open its stock balance."""
        if code and self._material_repo.get_by_code(code.strip()) is not None:
            raise ValidationError(f"Material '{code.strip().upper()}' already exists")

        threshold = (
            to_decimal(alert_threshold, "alert threshold")
            if alert_threshold is not None
            else None
        )

        # Auto-assign ID based on existing materials
        all_materials = self._material_repo.list_all()
        if all_materials:
            next_id = str(max(int(m.id) for m in all_materials) + 1)
        else:
            next_id = "1"

        material = Material.create(
            id=next_id,
            code=code,
            designation=designation,
            unit=unit,
            alert_threshold=threshold,
        )
        self._material_repo.save(material)
        self._ledger.open_balance(material.id)
        return material
