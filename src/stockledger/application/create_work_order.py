"""Application service: Create Work Order use case."""

from __future__ import annotations

from stockledger.application.lookup import material_by_code
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import Quantity
from stockledger.domain.model.work_order import WorkOrder
from stockledger.domain.repository.material_repository import MaterialRepository
from stockledger.domain.repository.work_order_repository import WorkOrderRepository


class CreateWorkOrderHandler:

    def __init__(
        self,
        work_order_repo: WorkOrderRepository,
        material_repo: MaterialRepository,
    ) -> None:
        self._work_order_repo = work_order_repo
        self._material_repo = material_repo

    def handle(
        self,
        number: str,
        material_code: str | None = None,
        planned_quantity: str | None = None,
        notes: str = "",
    ) -> WorkOrder:
        if number and self._work_order_repo.get_by_number(number) is not None:
            raise ValidationError(f"Work order '{number.strip()}' already exists")

        material_id = None
        if material_code is not None:
            material_id = material_by_code(self._material_repo, material_code).id
        planned = Quantity.of(planned_quantity).value if planned_quantity is not None else None

        work_order = WorkOrder.create(
            number=number,
            material_id=material_id,
            planned_quantity=planned,
            notes=notes,
        )
        self._work_order_repo.save(work_order)
        return work_order
