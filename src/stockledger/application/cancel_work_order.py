"""Application service: Cancel Work Order use case.

Cancelling never touches stock: nothing was consumed before completion.
"""

from __future__ import annotations

from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.repository.work_order_repository import WorkOrderRepository


class CancelWorkOrderHandler:

    def __init__(self, work_order_repo: WorkOrderRepository) -> None:
        self._work_order_repo = work_order_repo

    def handle(self, work_order_id: int) -> None:
        work_order = self._work_order_repo.get_by_id(work_order_id)
        if work_order is None:
            raise EntityNotFoundError(f"Work order #{work_order_id} not found")

        work_order.cancel()
        self._work_order_repo.save(work_order)
