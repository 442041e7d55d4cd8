"""StockBalance aggregate: the current-state projection of the ledger.

Each material has exactly one StockBalance.  It is derived data: replaying
every movement of the material from an empty balance must reproduce the
same ``on_hand`` and ``weighted_average_cost``.  ``reserved`` is the only
field not driven by movements; it belongs to order reservations.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from stockledger.domain.exceptions import InvalidQuantityError, ValidationError
from stockledger.domain.model.movement import StockMovement
from stockledger.domain.model.value_objects import ZERO


@dataclass
class StockBalance:
    """Aggregate root for a material's current stock.

    Invariants:
    - ``on_hand`` equals the sum of signed quantities of all movements
    - ``weighted_average_cost`` only moves on ENTRY / BYPRODUCT_RETURN
    - ``available`` and ``stock_value`` are always computed, never stored

    ``on_hand`` may go negative (stock issued before it was counted in);
    an ADJUSTMENT reconciles it later.
    """

    material_id: str
    on_hand: Decimal = ZERO
    reserved: Decimal = ZERO
    weighted_average_cost: Decimal = ZERO
    version: int = 0
    updated_at: datetime | None = None

    @property
    def available(self) -> Decimal:
        return self.on_hand - self.reserved

    @property
    def stock_value(self) -> Decimal:
        return self.on_hand * self.weighted_average_cost

    # --- Movements ------------------------------------------------------------

    def apply(self, movement: StockMovement) -> None:
        """Fold one movement into the projection.

        Cost-bearing inflows recompute the average::

            new_average = (Q0 * C0 + q * c) / (Q0 + q)   when Q0 > 0
                        = c                              when Q0 <= 0

        Exits and adjustments change the quantity only.
        """
        if movement.material_id != self.material_id:
            raise ValidationError(
                f"Movement for material '{movement.material_id}' cannot be applied "
                f"to balance of '{self.material_id}'"
            )
        previous = self.on_hand
        self.on_hand = previous + movement.quantity

        if movement.kind.is_cost_bearing:
            if previous <= ZERO:
                self.weighted_average_cost = movement.unit_cost
            else:
                total_value = (
                    previous * self.weighted_average_cost
                    + movement.quantity * movement.unit_cost
                )
                self.weighted_average_cost = total_value / self.on_hand

        self.updated_at = movement.recorded_at

    @staticmethod
    def replay(
        material_id: str,
        movements: Iterable[StockMovement],
        reserved: Decimal = ZERO,
    ) -> StockBalance:
        """Rebuild a balance from scratch out of the movement history."""
        balance = StockBalance(material_id=material_id, reserved=reserved)
        for movement in sorted(movements, key=lambda m: m.sort_key):
            balance.apply(movement)
        return balance

    # --- Reservations ---------------------------------------------------------

    def reserve(self, quantity: Decimal) -> None:
        """Earmark stock for an open order.

        Raises ValidationError if insufficient stock is available.
        """
        if quantity <= ZERO:
            raise InvalidQuantityError("Reservation quantity must be positive")
        if quantity > self.available:
            raise ValidationError(
                f"Insufficient stock for material '{self.material_id}' "
                f"(need {quantity}, have {self.available} available)"
            )
        self.reserved += quantity

    def release(self, quantity: Decimal) -> None:
        """Release previously reserved stock (e.g. on order cancellation)."""
        if quantity <= ZERO:
            raise InvalidQuantityError("Release quantity must be positive")
        if quantity > self.reserved:
            raise ValidationError(
                f"Cannot release {quantity} of material '{self.material_id}' "
                f"- only {self.reserved} currently reserved"
            )
        self.reserved -= quantity

    # --- Comparison -----------------------------------------------------------

    def differences(self, other: StockBalance) -> dict[str, tuple[Decimal, Decimal]]:
        """Field-by-field mismatches in the movement-driven numbers."""
        diffs: dict[str, tuple[Decimal, Decimal]] = {}
        for name in ("on_hand", "weighted_average_cost"):
            mine, theirs = getattr(self, name), getattr(other, name)
            if mine != theirs:
                diffs[name] = (mine, theirs)
        return diffs
