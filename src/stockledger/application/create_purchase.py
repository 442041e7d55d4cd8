"""Application service: Create Purchase use case."""

from __future__ import annotations

from stockledger.application.dto import PurchaseLineSpec
from stockledger.application.lookup import material_by_code
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.purchase import Purchase, PurchaseLine
from stockledger.domain.model.value_objects import Quantity, UnitCost
from stockledger.domain.repository.material_repository import MaterialRepository
from stockledger.domain.repository.purchase_repository import PurchaseRepository


class CreatePurchaseHandler:

    def __init__(
        self,
        purchase_repo: PurchaseRepository,
        material_repo: MaterialRepository,
    ) -> None:
        self._purchase_repo = purchase_repo
        self._material_repo = material_repo

    def handle(self, number: str, supplier: str, line_specs: list[PurchaseLineSpec]) -> Purchase:
        """Create a purchase in ORDERED status.

        Lines are numbered in input order, starting at 1.  Purchase numbers
        are unique: receipts find their movements by number.
        """
        if number and self._purchase_repo.get_by_number(number) is not None:
            raise ValidationError(f"Purchase '{number.strip()}' already exists")

        lines: list[PurchaseLine] = []
        for line_number, spec in enumerate(line_specs, start=1):
            material_id = None
            designation = spec.designation
            if spec.material_code is not None:
                material = material_by_code(self._material_repo, spec.material_code)
                material_id = material.id
                designation = designation or material.designation

            lines.append(
                PurchaseLine(
                    line_number=line_number,
                    designation=designation,
                    quantity=Quantity.magnitude(spec.quantity).value,
                    unit_price=UnitCost.of(spec.unit_price).amount,
                    material_id=material_id,
                )
            )

        purchase = Purchase.create(number=number, supplier=supplier, lines=lines)
        self._purchase_repo.save(purchase)
        return purchase
