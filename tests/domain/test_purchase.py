"""Unit tests for the Purchase aggregate."""

from decimal import Decimal

import pytest

from stockledger.domain.exceptions import InvalidStateError, ValidationError
from stockledger.domain.model.purchase import MAX_LINES, Purchase, PurchaseLine, PurchaseStatus


def _line(n, material_id="1", qty="10", price="2"):
    return PurchaseLine(
        line_number=n,
        designation=f"Line {n}",
        quantity=Decimal(qty),
        unit_price=Decimal(price),
        material_id=material_id,
    )


class TestPurchaseCreate:

    def test_lines_are_sorted_by_number(self):
        purchase = Purchase.create("AC-1", "Acme", [_line(2), _line(1)])
        assert [line.line_number for line in purchase.lines] == [1, 2]
        assert purchase.status == PurchaseStatus.ORDERED

    def test_supplier_required(self):
        with pytest.raises(ValidationError, match="Supplier"):
            Purchase.create("AC-1", " ", [_line(1)])

    def test_at_least_one_line(self):
        with pytest.raises(ValidationError, match="at least one line"):
            Purchase.create("AC-1", "Acme", [])

    def test_duplicate_line_numbers_rejected(self):
        with pytest.raises(ValidationError, match="unique"):
            Purchase.create("AC-1", "Acme", [_line(1), _line(1)])

    def test_too_many_lines_rejected(self):
        lines = [_line(n) for n in range(1, MAX_LINES + 2)]
        with pytest.raises(ValidationError, match="Maximum"):
            Purchase.create("AC-1", "Acme", lines)


class TestPurchaseLines:

    def test_stock_lines_exclude_services(self):
        purchase = Purchase.create(
            "AC-1", "Acme", [_line(1), _line(2, material_id=None), _line(3, material_id="2")]
        )
        assert [line.line_number for line in purchase.stock_lines] == [1, 3]

    def test_total_includes_every_line(self):
        purchase = Purchase.create(
            "AC-1", "Acme", [_line(1, qty="10", price="2"), _line(2, material_id=None, qty="1", price="15")]
        )
        assert purchase.total == Decimal("35")


class TestPurchaseTransitions:

    def test_mark_delivered(self):
        purchase = Purchase.create("AC-1", "Acme", [_line(1)])
        purchase.mark_delivered()
        assert purchase.status == PurchaseStatus.DELIVERED
        assert purchase.delivered_at is not None

    def test_cannot_receive_twice(self):
        purchase = Purchase.create("AC-1", "Acme", [_line(1)])
        purchase.mark_delivered()
        with pytest.raises(InvalidStateError, match="expected ORDERED"):
            purchase.ensure_can_receive()
