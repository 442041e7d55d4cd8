"""Application service: Show Purchase use case (query)."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.model.purchase import Purchase
from stockledger.domain.repository.material_repository import MaterialRepository
from stockledger.domain.repository.purchase_repository import PurchaseRepository


@dataclass(frozen=True)
class PurchaseLineDTO:
    line_number: int
    designation: str
    material_code: str | None
    quantity: Decimal
    unit_price: Decimal
    line_amount: Decimal


@dataclass(frozen=True)
class PurchaseDTO:
    id: int
    number: str
    supplier: str
    status: str
    lines: list[PurchaseLineDTO]
    total: Decimal
    ordered_at: str
    delivered_at: str | None


class ShowPurchaseHandler:

    def __init__(
        self,
        purchase_repo: PurchaseRepository,
        material_repo: MaterialRepository,
    ) -> None:
        self._purchase_repo = purchase_repo
        self._material_repo = material_repo

    def handle(self, purchase_id: int) -> PurchaseDTO:
        purchase = self._purchase_repo.get_by_id(purchase_id)
        if purchase is None:
            raise EntityNotFoundError(f"Purchase #{purchase_id} not found")
        return self._to_dto(purchase)

    def _to_dto(self, purchase: Purchase) -> PurchaseDTO:
        lines = []
        for line in purchase.lines:
            material = (
                self._material_repo.get_by_id(line.material_id)
                if line.material_id is not None
                else None
            )
            lines.append(
                PurchaseLineDTO(
                    line_number=line.line_number,
                    designation=line.designation,
                    material_code=material.code if material else None,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    line_amount=line.line_amount,
                )
            )
        return PurchaseDTO(
            id=purchase.id,  # type: ignore[arg-type]
            number=purchase.number,
            supplier=purchase.supplier,
            status=purchase.status.value,
            lines=lines,
            total=purchase.total,
            ordered_at=purchase.ordered_at.strftime("%Y-%m-%d %H:%M UTC"),
            delivered_at=(
                purchase.delivered_at.strftime("%Y-%m-%d %H:%M UTC")
                if purchase.delivered_at
                else None
            ),
        )
