"""Unit tests for the StockBalance projection and its average-cost rule."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from stockledger.domain.exceptions import InvalidQuantityError, ValidationError
from stockledger.domain.model.balance import StockBalance
from stockledger.domain.model.movement import MovementKind, StockMovement
from stockledger.domain.model.value_objects import UnitCost

_T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _movement(kind, quantity, cost, seq=0, material_id="1"):
    return StockMovement.create(
        material_id=material_id,
        kind=kind,
        quantity=kind.signed(quantity),
        unit_cost=UnitCost.of(cost),
        recorded_at=_T0 + timedelta(seconds=seq),
    )


def _balance_after(*movements):
    balance = StockBalance(material_id="1")
    for m in movements:
        balance.apply(m)
    return balance


# ── Weighted-average cost ────────────────────────────────────────────────────


class TestAverageCost:

    def test_first_entry_sets_average(self):
        balance = _balance_after(_movement(MovementKind.ENTRY, "10", "2"))
        assert balance.on_hand == Decimal("10")
        assert balance.weighted_average_cost == Decimal("2")

    def test_second_entry_averages(self):
        balance = _balance_after(
            _movement(MovementKind.ENTRY, "10", "2"),
            _movement(MovementKind.ENTRY, "10", "4"),
        )
        assert balance.on_hand == Decimal("20")
        assert balance.weighted_average_cost == Decimal("3")

    def test_exit_keeps_average(self):
        balance = _balance_after(
            _movement(MovementKind.ENTRY, "10", "2"),
            _movement(MovementKind.ENTRY, "10", "4"),
            _movement(MovementKind.EXIT, "5", "3"),
        )
        assert balance.on_hand == Decimal("15")
        assert balance.weighted_average_cost == Decimal("3")

    def test_adjustment_keeps_average(self):
        balance = _balance_after(
            _movement(MovementKind.ENTRY, "10", "2"),
            _movement(MovementKind.ENTRY, "10", "4"),
            _movement(MovementKind.EXIT, "5", "3"),
            _movement(MovementKind.ADJUSTMENT, "-2", "3"),
        )
        assert balance.on_hand == Decimal("13")
        assert balance.weighted_average_cost == Decimal("3")

    def test_zero_cost_byproduct_dilutes_average(self):
        balance = StockBalance(
            material_id="1", on_hand=Decimal("13"), weighted_average_cost=Decimal("3")
        )
        balance.apply(_movement(MovementKind.EXIT, "8", "3"))
        balance.apply(_movement(MovementKind.BYPRODUCT_RETURN, "1.5", "0"))
        assert balance.on_hand == Decimal("6.5")
        assert round(balance.weighted_average_cost, 4) == Decimal("2.3077")

    def test_stock_value_is_on_hand_times_average(self):
        balance = _balance_after(
            _movement(MovementKind.ENTRY, "10", "2"),
            _movement(MovementKind.ENTRY, "10", "4"),
        )
        assert balance.stock_value == Decimal("60")


# ── Negative on-hand ─────────────────────────────────────────────────────────


class TestNegativeOnHand:

    def test_exit_beyond_stock_goes_negative(self):
        balance = _balance_after(
            _movement(MovementKind.ENTRY, "5", "2"),
            _movement(MovementKind.EXIT, "8", "2"),
        )
        assert balance.on_hand == Decimal("-3")
        assert balance.weighted_average_cost == Decimal("2")

    def test_entry_from_negative_resets_average(self):
        balance = _balance_after(
            _movement(MovementKind.ENTRY, "5", "2"),
            _movement(MovementKind.EXIT, "8", "2"),
            _movement(MovementKind.ENTRY, "10", "7"),
        )
        assert balance.on_hand == Decimal("7")
        assert balance.weighted_average_cost == Decimal("7")

    def test_entry_from_exactly_zero_takes_new_cost(self):
        balance = _balance_after(
            _movement(MovementKind.ENTRY, "5", "2"),
            _movement(MovementKind.EXIT, "5", "2"),
            _movement(MovementKind.ENTRY, "1", "9"),
        )
        assert balance.weighted_average_cost == Decimal("9")


# ── Replay ───────────────────────────────────────────────────────────────────


class TestReplay:

    def test_replay_matches_incremental_apply(self):
        movements = [
            _movement(MovementKind.ENTRY, "10", "2", seq=1),
            _movement(MovementKind.ENTRY, "10", "4", seq=2),
            _movement(MovementKind.EXIT, "5", "3", seq=3),
            _movement(MovementKind.BYPRODUCT_RETURN, "1", "0", seq=4),
        ]
        incremental = _balance_after(*movements)
        replayed = StockBalance.replay("1", reversed(movements))
        assert replayed.differences(incremental) == {}

    def test_replay_keeps_reserved(self):
        replayed = StockBalance.replay("1", [], reserved=Decimal("4"))
        assert replayed.reserved == Decimal("4")
        assert replayed.on_hand == Decimal("0")

    def test_foreign_movement_rejected(self):
        balance = StockBalance(material_id="1")
        with pytest.raises(ValidationError, match="cannot be applied"):
            balance.apply(_movement(MovementKind.ENTRY, "1", "1", material_id="2"))

    def test_differences_reports_mismatch(self):
        a = StockBalance(material_id="1", on_hand=Decimal("5"))
        b = StockBalance(material_id="1", on_hand=Decimal("4"))
        assert a.differences(b) == {"on_hand": (Decimal("5"), Decimal("4"))}


# ── Reservations ─────────────────────────────────────────────────────────────


class TestReservations:

    def test_reserve_reduces_available(self):
        balance = StockBalance(material_id="1", on_hand=Decimal("10"))
        balance.reserve(Decimal("4"))
        assert balance.available == Decimal("6")
        assert balance.on_hand == Decimal("10")

    def test_reserve_more_than_available_rejected(self):
        balance = StockBalance(material_id="1", on_hand=Decimal("10"), reserved=Decimal("8"))
        with pytest.raises(ValidationError, match="Insufficient stock"):
            balance.reserve(Decimal("3"))

    def test_reserve_zero_rejected(self):
        balance = StockBalance(material_id="1", on_hand=Decimal("10"))
        with pytest.raises(InvalidQuantityError):
            balance.reserve(Decimal("0"))

    def test_release_restores_available(self):
        balance = StockBalance(material_id="1", on_hand=Decimal("10"), reserved=Decimal("4"))
        balance.release(Decimal("4"))
        assert balance.available == Decimal("10")

    def test_release_more_than_reserved_rejected(self):
        balance = StockBalance(material_id="1", on_hand=Decimal("10"), reserved=Decimal("1"))
        with pytest.raises(ValidationError, match="Cannot release"):
            balance.release(Decimal("2"))
