"""Application service: Start Work Order use case."""

from __future__ import annotations

from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.repository.work_order_repository import WorkOrderRepository


class StartWorkOrderHandler:

    def __init__(self, work_order_repo: WorkOrderRepository) -> None:
        self._work_order_repo = work_order_repo

    def handle(self, work_order_id: int) -> None:
        work_order = self._work_order_repo.get_by_id(work_order_id)
        if work_order is None:
            raise EntityNotFoundError(f"Work order #{work_order_id} not found")

        work_order.start()
        self._work_order_repo.save(work_order)
