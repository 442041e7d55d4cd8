"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.

Stock quantities are expressed in the material's own unit (m², m, kg,
pieces...).  The domain never converts between units, so a quantity is
just a signed Decimal.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from stockledger.domain.exceptions import (
    InvalidCostError,
    InvalidQuantityError,
    ValidationError,
)

ZERO = Decimal("0")

Numeric = str | int | float | Decimal


def to_decimal(value: Numeric, label: str = "value") -> Decimal:
    """Coerce *value* to a finite Decimal.

    Goes through ``str()`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than the binary approximation of the float.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {label}: {value!r}")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid {label}: {value!r}") from exc
    if not result.is_finite():
        raise ValidationError(f"Invalid {label}: {value!r}")
    return result


@dataclass(frozen=True)
class Quantity:
    """A signed quantity in the material's unit of measure."""

    value: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            raise InvalidQuantityError(
                f"Quantity must be a Decimal, got {type(self.value).__name__}"
            )
        if not self.value.is_finite():
            raise InvalidQuantityError(f"Quantity must be finite, got {self.value}")

    @property
    def is_positive(self) -> bool:
        return self.value > ZERO

    def __str__(self) -> str:
        return f"{self.value:f}"

    @staticmethod
    def of(amount: Numeric) -> Quantity:
        try:
            return Quantity(to_decimal(amount, "quantity"))
        except ValidationError as exc:
            raise InvalidQuantityError(str(exc)) from exc

    @staticmethod
    def magnitude(amount: Numeric) -> Quantity:
        """A strictly positive quantity, as required for entries and exits."""
        qty = Quantity.of(amount)
        if not qty.is_positive:
            raise InvalidQuantityError(f"Quantity must be positive, got {qty}")
        return qty


@dataclass(frozen=True)
class UnitCost:
    """Non-negative cost of one unit of a material.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in stock valuation.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise InvalidCostError(
                f"Unit cost must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise InvalidCostError(f"Unit cost must be finite, got {self.amount}")
        if self.amount < ZERO:
            raise InvalidCostError(f"Unit cost cannot be negative, got {self.amount}")

    def __str__(self) -> str:
        return f"{self.amount:.4f}"

    @staticmethod
    def of(amount: Numeric) -> UnitCost:
        try:
            return UnitCost(to_decimal(amount, "unit cost"))
        except InvalidCostError:
            raise
        except ValidationError as exc:
            raise InvalidCostError(str(exc)) from exc
