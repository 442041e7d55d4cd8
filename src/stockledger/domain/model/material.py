"""Material aggregate (raw-material catalog entry).

Materials live independently of the stock ledger.  The ledger only needs
to know that a material exists; the unit of measure is carried here for
display and is never used for conversions.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import ZERO


@dataclass
class Material:
    """A raw material in the catalog (panel, profile, sheet...)."""

    id: str
    code: str
    designation: str
    unit: str
    alert_threshold: Decimal | None = None

    @staticmethod
    def create(
        id: str,
        code: str,
        designation: str,
        unit: str,
        alert_threshold: Decimal | None = None,
    ) -> Material:
        """Create a new material, enforcing catalog rules."""
        if not code or not code.strip():
            raise ValidationError("Material code is required")
        if not designation or not designation.strip():
            raise ValidationError("Material designation is required")
        if not unit or not unit.strip():
            raise ValidationError("Unit of measure is required")
        if alert_threshold is not None and alert_threshold < ZERO:
            raise ValidationError("Alert threshold cannot be negative")
        return Material(
            id=id,
            code=code.strip().upper(),
            designation=designation.strip(),
            unit=unit.strip(),
            alert_threshold=alert_threshold,
        )
