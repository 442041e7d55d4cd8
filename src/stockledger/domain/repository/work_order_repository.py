"""Abstract repository for the WorkOrder aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.work_order import WorkOrder


class WorkOrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, work_order_id: int) -> WorkOrder | None:
        """Return a work order by its ID, or None if not found."""

    @abstractmethod
    def get_by_number(self, number: str) -> WorkOrder | None:
        """Return a work order by its number (case-insensitive), or None."""

    @abstractmethod
    def save(self, work_order: WorkOrder) -> None:
        """Persist a new or updated work order (assigns an ID if missing)."""
