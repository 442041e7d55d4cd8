"""WorkOrder aggregate (bon de travail).

A work order consumes one raw material.  Only its completion touches
stock; the movements themselves are recorded by the production
completion use case, not by the aggregate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from stockledger.domain.exceptions import (
    InvalidQuantityError,
    InvalidStateError,
    ValidationError,
)
from stockledger.domain.model.value_objects import ZERO


class WorkOrderStatus(Enum):
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class WorkOrder:
    """Aggregate root for production work orders.

    Use ``WorkOrder.create()`` for new work orders.  The ``__init__`` is
    kept plain so the repository can reconstitute persisted ones.
    """

    id: int | None
    number: str
    material_id: str | None
    planned_quantity: Decimal | None = None
    status: WorkOrderStatus = WorkOrderStatus.PLANNED
    created_at: datetime = field(default_factory=_now)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    produced_quantity: Decimal | None = None
    byproduct_quantity: Decimal | None = None
    notes: str = ""

    @staticmethod
    def create(
        number: str,
        material_id: str | None,
        planned_quantity: Decimal | None = None,
        notes: str = "",
    ) -> WorkOrder:
        if not number or not number.strip():
            raise ValidationError("Work order number is required")
        if planned_quantity is not None and planned_quantity <= ZERO:
            raise InvalidQuantityError("Planned quantity must be positive")
        return WorkOrder(
            id=None,
            number=number.strip(),
            material_id=material_id,
            planned_quantity=planned_quantity,
            notes=notes.strip(),
        )

    # --- State transitions ----------------------------------------------------

    def start(self) -> None:
        """Transition PLANNED -> IN_PROGRESS."""
        if self.status != WorkOrderStatus.PLANNED:
            raise InvalidStateError(
                f"Cannot start work order {self.number} - current status is "
                f"{self.status.value}, expected PLANNED"
            )
        self.status = WorkOrderStatus.IN_PROGRESS
        self.started_at = _now()

    def ensure_can_complete(self, produced: Decimal, byproduct: Decimal) -> None:
        """Check completion preconditions without changing anything."""
        if self.status != WorkOrderStatus.IN_PROGRESS:
            raise InvalidStateError(
                f"Cannot complete work order {self.number} - current status is "
                f"{self.status.value}, expected IN_PROGRESS"
            )
        if produced < ZERO:
            raise InvalidQuantityError("Produced quantity cannot be negative")
        if byproduct < ZERO:
            raise InvalidQuantityError("Byproduct quantity cannot be negative")

    def complete(self, produced: Decimal, byproduct: Decimal) -> None:
        """Transition IN_PROGRESS -> COMPLETED and stamp actual quantities.

        Stock movements must be recorded *before* calling this
        (coordinated by the application handler).
        """
        self.ensure_can_complete(produced, byproduct)
        self.status = WorkOrderStatus.COMPLETED
        self.produced_quantity = produced
        self.byproduct_quantity = byproduct
        self.completed_at = _now()

    def cancel(self) -> None:
        """Transition PLANNED|IN_PROGRESS -> CANCELLED."""
        if self.status not in (WorkOrderStatus.PLANNED, WorkOrderStatus.IN_PROGRESS):
            raise InvalidStateError(
                f"Cannot cancel work order {self.number} in {self.status.value} status"
            )
        self.status = WorkOrderStatus.CANCELLED
