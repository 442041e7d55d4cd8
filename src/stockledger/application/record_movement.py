"""Application service: Record Movement use case.

Manual stock movements typed by a user: stock-count adjustments, ad-hoc
entries and exits.  Document-driven movements go through the purchase
and work-order use cases instead.
"""

from __future__ import annotations

from stockledger.application.dto import MovementDTO
from stockledger.application.lookup import material_by_code
from stockledger.domain.model.movement import MovementKind
from stockledger.domain.repository.material_repository import MaterialRepository
from stockledger.domain.service.stock_ledger import StockLedger


class RecordMovementHandler:

    def __init__(self, material_repo: MaterialRepository, ledger: StockLedger) -> None:
        self._material_repo = material_repo
        self._ledger = ledger

    def handle(
        self,
        material_code: str,
        kind: str,
        quantity: str,
        unit_cost: str | None = None,
        source_reference: str = "",
        comment: str = "",
    ) -> MovementDTO:
        material = material_by_code(self._material_repo, material_code)
        movement = self._ledger.record(
            material_id=material.id,
            kind=MovementKind.parse(kind),
            quantity=quantity,
            unit_cost=unit_cost,
            source_reference=source_reference,
            comment=comment,
        )
        return MovementDTO.from_domain(movement)
