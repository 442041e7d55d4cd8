"""Domain service: Stock Ledger.

The single write path for stock.  Every quantity change, whatever
business event caused it, becomes a StockMovement recorded here, and the
material's StockBalance is recomputed in the same commit.

Recording follows a validate-then-mutate approach:
  Phase 1 - validate every request (quantity, cost, material) before any
            lock is taken or any state is read.
  Phase 2 - under the per-material locks, load the balances, fold the new
            movements into them in memory.
  Phase 3 - hand movements and balances to the repository in one
            ``commit()`` call.  Either all of it lands or none of it does.

Only one writer per material can be inside phases 2-3 at a time, so the
weighted-average read-modify-write never interleaves.  Writers on
different materials do not wait on each other.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterator, Sequence

from stockledger.domain.exceptions import (
    InvalidCostError,
    UnknownMaterialError,
    ValidationError,
)
from stockledger.domain.model.balance import StockBalance
from stockledger.domain.model.movement import (
    MovementKind,
    MovementRequest,
    StockMovement,
)
from stockledger.domain.model.value_objects import (
    ZERO,
    Numeric,
    Quantity,
    UnitCost,
)
from stockledger.domain.repository.ledger_repository import LedgerRepository
from stockledger.domain.repository.material_repository import MaterialRepository
from stockledger.domain.service.keyed_locks import KeyedLocks
from stockledger.logging_config import get_logger

logger = get_logger("services.stock_ledger")

Clock = Callable[[], datetime]

# Shared by every ledger instance in the process unless one is injected.
_DEFAULT_LOCKS = KeyedLocks()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ConsistencyReport:
    """Stored projection vs. a full replay of the movement log."""

    material_id: str
    stored: StockBalance
    rebuilt: StockBalance
    movement_count: int

    @property
    def differences(self) -> dict[str, tuple[Decimal, Decimal]]:
        return self.stored.differences(self.rebuilt)

    @property
    def is_consistent(self) -> bool:
        return not self.differences


@dataclass(frozen=True)
class _PreparedMovement:
    request: MovementRequest
    quantity: Quantity
    unit_cost: UnitCost | None


class StockLedger:

    def __init__(
        self,
        ledger_repo: LedgerRepository,
        material_repo: MaterialRepository,
        locks: KeyedLocks | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._ledger_repo = ledger_repo
        self._material_repo = material_repo
        self._locks = locks if locks is not None else _DEFAULT_LOCKS
        self._clock = clock or _utcnow

    # --- Writes ---------------------------------------------------------------

    def open_balance(self, material_id: str) -> StockBalance:
        """Create the zeroed balance of a new material (idempotent)."""
        with self._locks.hold([material_id]):
            existing = self._ledger_repo.get_balance(material_id)
            if existing is not None:
                return existing
            balance = StockBalance(material_id=material_id, updated_at=self._clock())
            self._ledger_repo.save_balance(balance)
        logger.info("balance_opened", extra={"material_id": material_id})
        return balance

    def record(
        self,
        material_id: str,
        kind: MovementKind,
        quantity: Numeric,
        unit_cost: Numeric | None = None,
        source_reference: str = "",
        comment: str = "",
        source_line: int | None = None,
    ) -> StockMovement:
        """Record one movement and update the material's balance."""
        request = MovementRequest(
            material_id=material_id,
            kind=kind,
            quantity=quantity,
            unit_cost=unit_cost,
            source_reference=source_reference,
            comment=comment,
            source_line=source_line,
        )
        return self.record_batch([request])[0]

    def record_batch(self, requests: Sequence[MovementRequest]) -> list[StockMovement]:
        """Record several movements as one all-or-nothing unit.

        Movements are applied in the given order, so an EXIT followed by a
        BYPRODUCT_RETURN on the same material sees the exit's effect.
        """
        if not requests:
            raise ValidationError("At least one movement is required")

        # Phase 1: validate inputs
        prepared = [self._prepare(request) for request in requests]
        material_ids = {request.material_id for request in requests}
        for material_id in material_ids:
            if self._material_repo.get_by_id(material_id) is None:
                raise UnknownMaterialError(material_id)

        with self._locks.hold(material_ids):
            # Phase 2: fold into in-memory copies of the balances
            balances = {mid: self._require_balance(mid) for mid in material_ids}
            recorded_at = self._clock()
            movements: list[StockMovement] = []
            for item in prepared:
                balance = balances[item.request.material_id]
                unit_cost = item.unit_cost
                if unit_cost is None:
                    unit_cost = UnitCost(balance.weighted_average_cost)
                movement = StockMovement.create(
                    material_id=item.request.material_id,
                    kind=item.request.kind,
                    quantity=item.quantity,
                    unit_cost=unit_cost,
                    recorded_at=recorded_at,
                    source_reference=item.request.source_reference,
                    comment=item.request.comment,
                    source_line=item.request.source_line,
                )
                balance.apply(movement)
                movements.append(movement)
            for balance in balances.values():
                balance.version += 1

            # Phase 3: single atomic write
            stored = self._ledger_repo.commit(movements, list(balances.values()))

        for movement in stored:
            logger.info(
                "movement_recorded",
                extra={
                    "movement_id": movement.id,
                    "material_id": movement.material_id,
                    "kind": movement.kind,
                    "quantity": movement.quantity,
                    "unit_cost": movement.unit_cost,
                    "source_reference": movement.source_reference,
                },
            )
        for balance in balances.values():
            if balance.on_hand < ZERO:
                logger.warning(
                    "negative_on_hand",
                    extra={"material_id": balance.material_id, "on_hand": balance.on_hand},
                )
        return stored

    def reserve(self, material_id: str, quantity: Numeric) -> StockBalance:
        """Earmark available stock for an open order."""
        qty = Quantity.magnitude(quantity).value
        return self._mutate_reservation(material_id, lambda b: b.reserve(qty))

    def release(self, material_id: str, quantity: Numeric) -> StockBalance:
        """Give back previously reserved stock."""
        qty = Quantity.magnitude(quantity).value
        return self._mutate_reservation(material_id, lambda b: b.release(qty))

    def rebuild(self, material_id: str) -> StockBalance:
        """Recompute the balance strictly from the movement log and save it.

        ``reserved`` is kept as stored: it is not derived from movements.
        """
        with self._locks.hold([material_id]):
            report = self._compare(material_id)
            rebuilt = report.rebuilt
            rebuilt.version = report.stored.version + 1
            rebuilt.updated_at = self._clock()
            self._ledger_repo.save_balance(rebuilt)
        logger.info(
            "projection_rebuilt",
            extra={
                "material_id": material_id,
                "movement_count": report.movement_count,
                "repaired": not report.is_consistent,
            },
        )
        return rebuilt

    # --- Reads ----------------------------------------------------------------

    def balance(self, material_id: str) -> StockBalance:
        """Current projection of a material (a detached copy)."""
        return self._require_balance(material_id)

    def available(self, material_id: str) -> Decimal:
        return self.balance(material_id).available

    def history(
        self, material_id: str, limit: int, offset: int = 0
    ) -> list[StockMovement]:
        """One page of movements, most recent first."""
        if limit <= 0:
            raise ValidationError("History limit must be positive")
        if offset < 0:
            raise ValidationError("History offset cannot be negative")
        self._require_balance(material_id)
        return self._ledger_repo.history(material_id, limit, offset)

    def movements_for_reference(self, source_reference: str) -> list[StockMovement]:
        """Movements already recorded for a business document, oldest first."""
        if not source_reference.strip():
            raise ValidationError("Source reference is required")
        return self._ledger_repo.movements_by_reference(source_reference.strip())

    def iter_history(
        self, material_id: str, page_size: int = 50, offset: int = 0
    ) -> Iterator[StockMovement]:
        """Lazily walk the whole history, most recent first, page by page."""
        while True:
            page = self.history(material_id, page_size, offset)
            yield from page
            if len(page) < page_size:
                return
            offset += len(page)

    def check_consistency(self, material_id: str) -> ConsistencyReport:
        """Compare the stored balance with a replay, without writing."""
        with self._locks.hold([material_id]):
            report = self._compare(material_id)
        if not report.is_consistent:
            logger.warning(
                "projection_drift_detected",
                extra={
                    "material_id": material_id,
                    "differences": {
                        k: [str(v) for v in pair] for k, pair in report.differences.items()
                    },
                },
            )
        return report

    def check_all(self) -> list[ConsistencyReport]:
        material_ids = [b.material_id for b in self._ledger_repo.list_balances()]
        return [self.check_consistency(mid) for mid in sorted(material_ids)]

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _prepare(request: MovementRequest) -> _PreparedMovement:
        if not isinstance(request.kind, MovementKind):
            raise ValidationError(f"Unknown movement kind {request.kind!r}")
        quantity = request.kind.signed(request.quantity)
        if request.unit_cost is None:
            if request.kind.is_cost_bearing:
                raise InvalidCostError(
                    f"Unit cost is required for {request.kind.value} movements"
                )
            unit_cost = None
        else:
            unit_cost = UnitCost.of(request.unit_cost)
        return _PreparedMovement(request=request, quantity=quantity, unit_cost=unit_cost)

    def _require_balance(self, material_id: str) -> StockBalance:
        balance = self._ledger_repo.get_balance(material_id)
        if balance is None:
            raise UnknownMaterialError(material_id)
        return balance

    def _compare(self, material_id: str) -> ConsistencyReport:
        stored = self._require_balance(material_id)
        movements = self._ledger_repo.movements_for(material_id)
        rebuilt = StockBalance.replay(material_id, movements, reserved=stored.reserved)
        return ConsistencyReport(
            material_id=material_id,
            stored=stored,
            rebuilt=rebuilt,
            movement_count=len(movements),
        )

    def _mutate_reservation(
        self, material_id: str, change: Callable[[StockBalance], None]
    ) -> StockBalance:
        with self._locks.hold([material_id]):
            balance = self._require_balance(material_id)
            change(balance)
            balance.version += 1
            balance.updated_at = self._clock()
            self._ledger_repo.save_balance(balance)
        logger.info(
            "reservation_changed",
            extra={
                "material_id": material_id,
                "reserved": balance.reserved,
                "available": balance.available,
            },
        )
        return balance
