"""Stock movements: the immutable facts of the stock ledger.

A movement is never edited or deleted once recorded.  Mistakes are fixed
by recording a compensating movement (usually an ADJUSTMENT).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from stockledger.domain.exceptions import InvalidQuantityError, ValidationError
from stockledger.domain.model.value_objects import Numeric, Quantity, UnitCost


class MovementKind(Enum):
    ENTRY = "ENTRY"
    EXIT = "EXIT"
    ADJUSTMENT = "ADJUSTMENT"
    BYPRODUCT_RETURN = "BYPRODUCT_RETURN"

    @property
    def is_cost_bearing(self) -> bool:
        """True for inflows that feed the weighted-average cost."""
        return self in (MovementKind.ENTRY, MovementKind.BYPRODUCT_RETURN)

    def signed(self, quantity: Numeric) -> Quantity:
        """Apply this kind's sign convention to a caller-supplied quantity.

        ENTRY, EXIT and BYPRODUCT_RETURN take a strictly positive magnitude;
        EXIT is negated.  ADJUSTMENT is a signed delta taken as-is and only
        has to be non-zero.
        """
        if self is MovementKind.ADJUSTMENT:
            delta = Quantity.of(quantity)
            if delta.value == 0:
                raise InvalidQuantityError("Adjustment quantity cannot be zero")
            return delta
        magnitude = Quantity.magnitude(quantity)
        if self is MovementKind.EXIT:
            return Quantity(-magnitude.value)
        return magnitude

    @staticmethod
    def parse(raw: str) -> MovementKind:
        key = raw.strip().upper().replace("-", "_")
        aliases = {"IN": "ENTRY", "OUT": "EXIT", "BYPRODUCT": "BYPRODUCT_RETURN"}
        try:
            return MovementKind(aliases.get(key, key))
        except ValueError:
            raise ValidationError(f"Unknown movement kind '{raw}'") from None


@dataclass(frozen=True)
class MovementRequest:
    """Input: one movement a caller wants recorded.

    ``quantity`` is a magnitude for ENTRY/EXIT/BYPRODUCT_RETURN and a
    signed delta for ADJUSTMENT.  ``unit_cost`` may be omitted for EXIT
    and ADJUSTMENT; the ledger then values the movement at the current
    weighted-average cost.
    """

    material_id: str
    kind: MovementKind
    quantity: Numeric
    unit_cost: Numeric | None = None
    source_reference: str = ""
    comment: str = ""
    source_line: int | None = None


@dataclass(frozen=True)
class StockMovement:
    """A recorded change to one material's on-hand quantity.

    ``quantity`` is already signed (exits are negative).  ``movement_value``
    is frozen at recording time so later average-cost changes never
    rewrite history.  ``id`` is None only until the repository commits it.
    ``source_line`` is the line of the originating document, when it has
    lines (purchases).
    """

    id: int | None
    material_id: str
    kind: MovementKind
    quantity: Decimal
    unit_cost: Decimal
    movement_value: Decimal
    recorded_at: datetime
    source_reference: str = ""
    comment: str = ""
    source_line: int | None = None

    @staticmethod
    def create(
        material_id: str,
        kind: MovementKind,
        quantity: Quantity,
        unit_cost: UnitCost,
        recorded_at: datetime,
        source_reference: str = "",
        comment: str = "",
        source_line: int | None = None,
    ) -> StockMovement:
        return StockMovement(
            id=None,
            material_id=material_id,
            kind=kind,
            quantity=quantity.value,
            unit_cost=unit_cost.amount,
            movement_value=quantity.value * unit_cost.amount,
            recorded_at=recorded_at,
            source_reference=source_reference.strip(),
            comment=comment.strip(),
            source_line=source_line,
        )

    @property
    def sort_key(self) -> tuple[datetime, int]:
        """Chronological order: ``recorded_at``, then ``id`` as tiebreak."""
        return (self.recorded_at, self.id if self.id is not None else -1)
