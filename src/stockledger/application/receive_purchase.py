"""Application service: Receive Purchase use case.

Translates "goods delivered" into one ENTRY per stock line, at the line's
unit price, then marks the purchase DELIVERED.

Lines are recorded one at a time, in line-number order.  If a line fails
after earlier lines were recorded, the recorded entries stay (the ledger
is append-only), the purchase stays ORDERED, and PartialReceiptFailure
tells the caller which lines made it.
If the very first stock line fails nothing was written and the original
error propagates as-is.

Every entry carries the purchase number and its line number, so receiving
the purchase again (after fixing a failed line, or after the final save
failed) skips the lines already in the ledger and records only the rest.
"""

from __future__ import annotations

from stockledger.application.dto import ReceiptResult
from stockledger.domain.exceptions import (
    DomainException,
    EntityNotFoundError,
    PartialReceiptFailure,
)
from stockledger.domain.model.movement import MovementKind, StockMovement
from stockledger.domain.repository.purchase_repository import PurchaseRepository
from stockledger.domain.service.keyed_locks import KeyedLocks
from stockledger.domain.service.stock_ledger import StockLedger
from stockledger.logging_config import LogContext, get_logger

logger = get_logger("application.receive_purchase")

_PURCHASE_LOCKS = KeyedLocks()


class ReceivePurchaseHandler:

    def __init__(
        self,
        purchase_repo: PurchaseRepository,
        ledger: StockLedger,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._purchase_repo = purchase_repo
        self._ledger = ledger
        self._locks = locks if locks is not None else _PURCHASE_LOCKS

    def handle(self, purchase_id: int) -> ReceiptResult:
        with self._locks.hold([str(purchase_id)]):
            purchase = self._purchase_repo.get_by_id(purchase_id)
            if purchase is None:
                raise EntityNotFoundError(f"Purchase #{purchase_id} not found")

            with LogContext.bind(operation="receive_purchase", document=purchase.number):
                purchase.ensure_can_receive()

                already = self._entries_by_line(purchase.number)
                recorded: dict[int, int] = {}
                skipped: list[int] = []
                for line in purchase.lines:
                    if not line.is_stock_line:
                        skipped.append(line.line_number)
                        continue
                    if line.line_number in already:
                        recorded[line.line_number] = already[line.line_number].id  # type: ignore[assignment]
                        continue
                    try:
                        movement = self._ledger.record(
                            material_id=line.material_id,  # type: ignore[arg-type]
                            kind=MovementKind.ENTRY,
                            quantity=line.quantity,
                            unit_cost=line.unit_price,
                            source_reference=purchase.number,
                            comment=f"Line {line.line_number}: {line.designation}",
                            source_line=line.line_number,
                        )
                    except DomainException as exc:
                        if not recorded:
                            raise
                        logger.error(
                            "purchase_receipt_partial",
                            extra={
                                "purchase_id": purchase_id,
                                "recorded_lines": sorted(recorded),
                                "failed_line": line.line_number,
                                "error_code": exc.code,
                            },
                        )
                        raise PartialReceiptFailure(
                            purchase_number=purchase.number,
                            recorded_lines=recorded,
                            failed_line=line.line_number,
                            cause=exc,
                        ) from exc
                    recorded[line.line_number] = movement.id  # type: ignore[assignment]

                if already:
                    logger.warning(
                        "purchase_receipt_resumed",
                        extra={"purchase_id": purchase_id, "already_recorded": sorted(already)},
                    )
                purchase.mark_delivered()
                self._purchase_repo.save(purchase)

                logger.info(
                    "purchase_received",
                    extra={
                        "purchase_id": purchase_id,
                        "received_lines": sorted(recorded),
                        "skipped_lines": skipped,
                    },
                )

        return ReceiptResult(
            purchase_number=purchase.number,
            status=purchase.status.value,
            received_lines=recorded,
            skipped_lines=skipped,
        )

    def _entries_by_line(self, number: str) -> dict[int, StockMovement]:
        return {
            m.source_line: m
            for m in self._ledger.movements_for_reference(number)
            if m.kind is MovementKind.ENTRY and m.source_line is not None
        }
