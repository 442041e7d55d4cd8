"""Application service: Complete Work Order use case.

Translates "production finished" into stock movements:

- an EXIT of the produced quantity (raw material consumed), valued by the
  ledger at the current weighted-average cost;
- a BYPRODUCT_RETURN of the recovered offcuts at zero cost, which dilutes
  the average downwards.

Both movements go through a single ``record_batch`` call and the work
order is only marked COMPLETED once they are committed.  If the ledger
rejects anything, the work order stays IN_PROGRESS and no movement exists.

If the movements were committed but saving the work order failed, the
work order is still IN_PROGRESS while its movements exist.  Completing
it again finds them by work-order number and only saves the transition,
so stock is never consumed twice.
"""

from __future__ import annotations

from stockledger.application.dto import CompletionResult, MovementDTO
from stockledger.domain.exceptions import EntityNotFoundError, InvalidStateError
from stockledger.domain.model.movement import MovementKind, MovementRequest, StockMovement
from stockledger.domain.model.value_objects import ZERO, Numeric, Quantity
from stockledger.domain.repository.work_order_repository import WorkOrderRepository
from stockledger.domain.service.keyed_locks import KeyedLocks
from stockledger.domain.service.stock_ledger import StockLedger
from stockledger.logging_config import LogContext, get_logger

logger = get_logger("application.complete_work_order")

_WORK_ORDER_LOCKS = KeyedLocks()

_CONSUMPTION = "Production consumption"
_BYPRODUCT = "Byproduct return"


class CompleteWorkOrderHandler:

    def __init__(
        self,
        work_order_repo: WorkOrderRepository,
        ledger: StockLedger,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._work_order_repo = work_order_repo
        self._ledger = ledger
        self._locks = locks if locks is not None else _WORK_ORDER_LOCKS

    def handle(
        self,
        work_order_id: int,
        produced_quantity: Numeric,
        byproduct_quantity: Numeric = 0,
    ) -> CompletionResult:
        produced = Quantity.of(produced_quantity).value
        byproduct = Quantity.of(byproduct_quantity).value

        # A second caller completing the same work order waits here, then
        # fails the status check instead of consuming stock twice.
        with self._locks.hold([str(work_order_id)]):
            work_order = self._work_order_repo.get_by_id(work_order_id)
            if work_order is None:
                raise EntityNotFoundError(f"Work order #{work_order_id} not found")

            with LogContext.bind(operation="complete_work_order", document=work_order.number):
                work_order.ensure_can_complete(produced, byproduct)

                requests: list[MovementRequest] = []
                if work_order.material_id is not None:
                    if produced > ZERO:
                        requests.append(
                            MovementRequest(
                                material_id=work_order.material_id,
                                kind=MovementKind.EXIT,
                                quantity=produced,
                                source_reference=work_order.number,
                                comment=_CONSUMPTION,
                            )
                        )
                    if byproduct > ZERO:
                        requests.append(
                            MovementRequest(
                                material_id=work_order.material_id,
                                kind=MovementKind.BYPRODUCT_RETURN,
                                quantity=byproduct,
                                unit_cost=ZERO,
                                source_reference=work_order.number,
                                comment=_BYPRODUCT,
                            )
                        )

                movements = self._already_recorded(work_order.number, requests)
                if movements is None:
                    movements = self._ledger.record_batch(requests) if requests else []
                else:
                    logger.warning(
                        "work_order_completion_resumed",
                        extra={
                            "work_order_id": work_order_id,
                            "movement_ids": [m.id for m in movements],
                        },
                    )

                work_order.complete(produced, byproduct)
                self._work_order_repo.save(work_order)

                logger.info(
                    "work_order_completed",
                    extra={
                        "work_order_id": work_order_id,
                        "produced_quantity": produced,
                        "byproduct_quantity": byproduct,
                        "movement_ids": [m.id for m in movements],
                    },
                )

        return CompletionResult(
            work_order_number=work_order.number,
            status=work_order.status.value,
            movements=[MovementDTO.from_domain(m) for m in movements],
        )

    def _already_recorded(
        self, number: str, requests: list[MovementRequest]
    ) -> list[StockMovement] | None:
        """Movements an earlier, interrupted completion committed, if any."""
        existing = [
            m
            for m in self._ledger.movements_for_reference(number)
            if m.comment in (_CONSUMPTION, _BYPRODUCT)
        ]
        if not existing:
            return None
        recorded = [(m.material_id, m.kind, m.quantity) for m in existing]
        expected = [
            (r.material_id, r.kind, r.kind.signed(r.quantity).value) for r in requests
        ]
        if recorded != expected:
            raise InvalidStateError(
                f"Work order {number} already has stock movements "
                f"{[m.id for m in existing]} that do not match this completion"
            )
        return existing
