"""Data Transfer Objects - plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from stockledger.domain.model.balance import StockBalance
from stockledger.domain.model.material import Material
from stockledger.domain.model.movement import StockMovement


@dataclass(frozen=True)
class PurchaseLineSpec:
    """Input: one purchase line as typed by the user.

    ``material_code`` is None for non-stock lines (services, transport).
    """

    designation: str
    quantity: str
    unit_price: str
    material_code: str | None = None


@dataclass(frozen=True)
class BalanceDTO:
    """Output: a material's stock position."""

    material_id: str
    code: str
    designation: str
    unit: str
    on_hand: Decimal
    reserved: Decimal
    available: Decimal
    weighted_average_cost: Decimal
    stock_value: Decimal

    @staticmethod
    def from_domain(material: Material, balance: StockBalance) -> BalanceDTO:
        return BalanceDTO(
            material_id=material.id,
            code=material.code,
            designation=material.designation,
            unit=material.unit,
            on_hand=balance.on_hand,
            reserved=balance.reserved,
            available=balance.available,
            weighted_average_cost=balance.weighted_average_cost,
            stock_value=balance.stock_value,
        )


@dataclass(frozen=True)
class MovementDTO:
    """Output: a recorded movement as displayed to the user."""

    id: int
    material_id: str
    kind: str
    quantity: Decimal
    unit_cost: Decimal
    movement_value: Decimal
    source_reference: str
    comment: str
    recorded_at: str

    @staticmethod
    def from_domain(movement: StockMovement) -> MovementDTO:
        return MovementDTO(
            id=movement.id,  # type: ignore[arg-type]
            material_id=movement.material_id,
            kind=movement.kind.value,
            quantity=movement.quantity,
            unit_cost=movement.unit_cost,
            movement_value=movement.movement_value,
            source_reference=movement.source_reference,
            comment=movement.comment,
            recorded_at=movement.recorded_at.strftime("%Y-%m-%d %H:%M:%S UTC"),
        )


@dataclass(frozen=True)
class CompletionResult:
    """Output: what completing a work order did to stock."""

    work_order_number: str
    status: str
    movements: list[MovementDTO]


@dataclass(frozen=True)
class ReceiptResult:
    """Output: what receiving a purchase did to stock.

    ``received_lines`` maps line number -> movement id.
    """

    purchase_number: str
    status: str
    received_lines: dict[int, int]
    skipped_lines: list[int]
