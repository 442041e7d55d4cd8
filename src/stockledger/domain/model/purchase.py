"""Purchase aggregate (achat) and its line items.

Lines that reference a material are stock lines; the others (transport,
services...) never reach the ledger.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from stockledger.domain.exceptions import InvalidStateError, ValidationError
from stockledger.domain.model.value_objects import ZERO

MAX_LINES = 100


class PurchaseStatus(Enum):
    ORDERED = "ORDERED"
    DELIVERED = "DELIVERED"
    INVOICED = "INVOICED"
    PAID = "PAID"


@dataclass(frozen=True)
class PurchaseLine:
    """One line of a purchase.

    The aggregate does not re-check amounts: lines are reconstituted as
    stored, and a corrupt quantity or price surfaces as a stock error when
    the line is received.
    """

    line_number: int
    designation: str
    quantity: Decimal
    unit_price: Decimal
    material_id: str | None = None

    @property
    def is_stock_line(self) -> bool:
        return self.material_id is not None

    @property
    def line_amount(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass
class Purchase:
    """Aggregate root for supplier purchases."""

    id: int | None
    number: str
    supplier: str
    lines: list[PurchaseLine]
    status: PurchaseStatus = PurchaseStatus.ORDERED
    ordered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    delivered_at: datetime | None = None

    @staticmethod
    def create(number: str, supplier: str, lines: list[PurchaseLine]) -> Purchase:
        if not number or not number.strip():
            raise ValidationError("Purchase number is required")
        if not supplier or not supplier.strip():
            raise ValidationError("Supplier is required")
        if not lines:
            raise ValidationError("Purchase must contain at least one line")
        if len(lines) > MAX_LINES:
            raise ValidationError(f"Maximum {MAX_LINES} lines per purchase")
        numbers = [line.line_number for line in lines]
        if len(set(numbers)) != len(numbers):
            raise ValidationError("Purchase line numbers must be unique")
        return Purchase(
            id=None,
            number=number.strip(),
            supplier=supplier.strip(),
            lines=sorted(lines, key=lambda line: line.line_number),
        )

    # --- State transitions ----------------------------------------------------

    def ensure_can_receive(self) -> None:
        if self.status != PurchaseStatus.ORDERED:
            raise InvalidStateError(
                f"Cannot receive purchase {self.number} - current status is "
                f"{self.status.value}, expected ORDERED"
            )

    def mark_delivered(self) -> None:
        """Transition ORDERED -> DELIVERED.

        Stock entries for every stock line must be recorded *before*
        calling this.
        """
        self.ensure_can_receive()
        self.status = PurchaseStatus.DELIVERED
        self.delivered_at = datetime.now(timezone.utc)

    # --- Computed properties --------------------------------------------------

    @property
    def stock_lines(self) -> list[PurchaseLine]:
        return [line for line in self.lines if line.is_stock_line]

    @property
    def total(self) -> Decimal:
        result = ZERO
        for line in self.lines:
            result += line.line_amount
        return result
