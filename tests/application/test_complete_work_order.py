"""Integration tests for the work order use cases and production completion."""

import threading
from decimal import Decimal

import pytest

from stockledger.application.cancel_work_order import CancelWorkOrderHandler
from stockledger.application.complete_work_order import CompleteWorkOrderHandler
from stockledger.application.create_work_order import CreateWorkOrderHandler
from stockledger.application.start_work_order import StartWorkOrderHandler
from stockledger.domain.exceptions import (
    EntityNotFoundError,
    InvalidQuantityError,
    InvalidStateError,
    ValidationError,
)
from stockledger.domain.model.material import Material
from stockledger.domain.model.movement import MovementKind
from stockledger.domain.model.work_order import WorkOrderStatus
from stockledger.domain.service.keyed_locks import KeyedLocks
from stockledger.domain.service.stock_ledger import StockLedger
from tests.fakes import (
    FakeLedgerRepository,
    FakeMaterialRepository,
    FakeWorkOrderRepository,
    StepClock,
)


def _setup(on_hand="13", cost="3"):
    material_repo = FakeMaterialRepository(
        [Material(id="1", code="PAN-18", designation="Panneau 18mm", unit="m2")]
    )
    ledger_repo = FakeLedgerRepository()
    ledger = StockLedger(ledger_repo, material_repo, locks=KeyedLocks(), clock=StepClock())
    ledger.open_balance("1")
    if on_hand:
        ledger.record("1", MovementKind.ENTRY, on_hand, cost)
    work_order_repo = FakeWorkOrderRepository()
    return work_order_repo, material_repo, ledger, ledger_repo


def _started_work_order(work_order_repo, material_repo, material_code="PAN-18"):
    wo = CreateWorkOrderHandler(work_order_repo, material_repo).handle("BT-001", material_code)
    StartWorkOrderHandler(work_order_repo).handle(wo.id)
    return wo.id


def _complete_handler(work_order_repo, ledger):
    return CompleteWorkOrderHandler(work_order_repo, ledger, locks=KeyedLocks())


# ── Happy path ───────────────────────────────────────────────────────────────


class TestCompleteWorkOrder:

    def test_exit_and_zero_cost_byproduct(self):
        work_order_repo, material_repo, ledger, _ = _setup()
        wo_id = _started_work_order(work_order_repo, material_repo)

        result = _complete_handler(work_order_repo, ledger).handle(wo_id, "8", "1.5")

        assert result.status == "COMPLETED"
        assert [m.kind for m in result.movements] == ["EXIT", "BYPRODUCT_RETURN"]
        assert result.movements[0].quantity == Decimal("-8")
        assert result.movements[0].unit_cost == Decimal("3")
        assert result.movements[1].unit_cost == Decimal("0")
        assert all(m.source_reference == "BT-001" for m in result.movements)

        balance = ledger.balance("1")
        assert balance.on_hand == Decimal("6.5")
        assert round(balance.weighted_average_cost, 4) == Decimal("2.3077")

        wo = work_order_repo.get_by_id(wo_id)
        assert wo.status == WorkOrderStatus.COMPLETED
        assert wo.produced_quantity == Decimal("8")
        assert wo.byproduct_quantity == Decimal("1.5")

    def test_no_byproduct_records_exit_only(self):
        work_order_repo, material_repo, ledger, _ = _setup()
        wo_id = _started_work_order(work_order_repo, material_repo)
        result = _complete_handler(work_order_repo, ledger).handle(wo_id, "8")
        assert [m.kind for m in result.movements] == ["EXIT"]
        assert ledger.balance("1").weighted_average_cost == Decimal("3")

    def test_work_order_without_material_has_no_movements(self):
        work_order_repo, material_repo, ledger, ledger_repo = _setup()
        wo_id = _started_work_order(work_order_repo, material_repo, material_code=None)
        before = len(ledger_repo.all_movements)

        result = _complete_handler(work_order_repo, ledger).handle(wo_id, "8", "1")

        assert result.movements == []
        assert result.status == "COMPLETED"
        assert len(ledger_repo.all_movements) == before

    def test_production_may_drive_stock_negative(self):
        work_order_repo, material_repo, ledger, _ = _setup(on_hand="2")
        wo_id = _started_work_order(work_order_repo, material_repo)
        _complete_handler(work_order_repo, ledger).handle(wo_id, "5")
        assert ledger.balance("1").on_hand == Decimal("-3")


# ── Failures leave everything untouched ──────────────────────────────────────


class TestCompleteWorkOrderFailures:

    def test_not_started_is_rejected_without_movements(self):
        work_order_repo, material_repo, ledger, ledger_repo = _setup()
        wo = CreateWorkOrderHandler(work_order_repo, material_repo).handle("BT-001", "PAN-18")
        before = len(ledger_repo.all_movements)

        with pytest.raises(InvalidStateError):
            _complete_handler(work_order_repo, ledger).handle(wo.id, "8")

        assert len(ledger_repo.all_movements) == before
        assert work_order_repo.get_by_id(wo.id).status == WorkOrderStatus.PLANNED

    def test_ledger_failure_keeps_work_order_in_progress(self):
        work_order_repo, material_repo, ledger, ledger_repo = _setup()
        wo_id = _started_work_order(work_order_repo, material_repo)
        before = len(ledger_repo.all_movements)
        ledger_repo.fail_next_commit = OSError("disk full")

        with pytest.raises(OSError):
            _complete_handler(work_order_repo, ledger).handle(wo_id, "8", "1.5")

        assert len(ledger_repo.all_movements) == before
        assert ledger.balance("1").on_hand == Decimal("13")
        assert work_order_repo.get_by_id(wo_id).status == WorkOrderStatus.IN_PROGRESS

    def test_negative_byproduct_rejected(self):
        work_order_repo, material_repo, ledger, _ = _setup()
        wo_id = _started_work_order(work_order_repo, material_repo)
        with pytest.raises(InvalidQuantityError):
            _complete_handler(work_order_repo, ledger).handle(wo_id, "8", "-1")
        assert work_order_repo.get_by_id(wo_id).status == WorkOrderStatus.IN_PROGRESS

    def test_completing_twice_consumes_once(self):
        work_order_repo, material_repo, ledger, _ = _setup()
        wo_id = _started_work_order(work_order_repo, material_repo)
        handler = _complete_handler(work_order_repo, ledger)
        handler.handle(wo_id, "8")
        with pytest.raises(InvalidStateError):
            handler.handle(wo_id, "8")
        assert ledger.balance("1").on_hand == Decimal("5")

    def test_concurrent_completion_consumes_once(self):
        work_order_repo, material_repo, ledger, _ = _setup()
        wo_id = _started_work_order(work_order_repo, material_repo)
        handler = _complete_handler(work_order_repo, ledger)
        outcomes = []

        def complete():
            try:
                handler.handle(wo_id, "8")
                outcomes.append("ok")
            except InvalidStateError:
                outcomes.append("rejected")

        threads = [threading.Thread(target=complete) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes) == ["ok", "rejected", "rejected"]
        assert ledger.balance("1").on_hand == Decimal("5")

    def test_retry_after_failed_save_consumes_once(self):
        work_order_repo, material_repo, ledger, ledger_repo = _setup()
        wo_id = _started_work_order(work_order_repo, material_repo)
        handler = _complete_handler(work_order_repo, ledger)
        work_order_repo.fail_next_save = OSError("disk full")

        with pytest.raises(OSError):
            handler.handle(wo_id, "8", "1.5")
        assert work_order_repo.get_by_id(wo_id).status == WorkOrderStatus.IN_PROGRESS
        assert ledger.balance("1").on_hand == Decimal("6.5")
        committed = len(ledger_repo.all_movements)

        result = handler.handle(wo_id, "8", "1.5")

        assert result.status == "COMPLETED"
        assert [m.kind for m in result.movements] == ["EXIT", "BYPRODUCT_RETURN"]
        assert len(ledger_repo.all_movements) == committed
        exits = [m for m in ledger_repo.all_movements if m.kind is MovementKind.EXIT]
        assert len(exits) == 1
        assert ledger.balance("1").on_hand == Decimal("6.5")
        assert work_order_repo.get_by_id(wo_id).status == WorkOrderStatus.COMPLETED

    def test_retry_with_other_quantities_after_failed_save_rejected(self):
        work_order_repo, material_repo, ledger, _ = _setup()
        wo_id = _started_work_order(work_order_repo, material_repo)
        handler = _complete_handler(work_order_repo, ledger)
        work_order_repo.fail_next_save = OSError("disk full")
        with pytest.raises(OSError):
            handler.handle(wo_id, "8")

        with pytest.raises(InvalidStateError):
            handler.handle(wo_id, "5")

        assert ledger.balance("1").on_hand == Decimal("5")
        assert work_order_repo.get_by_id(wo_id).status == WorkOrderStatus.IN_PROGRESS

    def test_unknown_work_order(self):
        work_order_repo, _, ledger, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            _complete_handler(work_order_repo, ledger).handle(99, "1")


class TestWorkOrderLifecycle:

    def test_cancel_does_not_touch_stock(self):
        work_order_repo, material_repo, ledger, _ = _setup()
        wo_id = _started_work_order(work_order_repo, material_repo)
        CancelWorkOrderHandler(work_order_repo).handle(wo_id)
        assert work_order_repo.get_by_id(wo_id).status == WorkOrderStatus.CANCELLED
        assert ledger.balance("1").on_hand == Decimal("13")

    def test_cancelled_cannot_complete(self):
        work_order_repo, material_repo, ledger, _ = _setup()
        wo_id = _started_work_order(work_order_repo, material_repo)
        CancelWorkOrderHandler(work_order_repo).handle(wo_id)
        with pytest.raises(InvalidStateError):
            _complete_handler(work_order_repo, ledger).handle(wo_id, "1")

    def test_duplicate_number_rejected(self):
        work_order_repo, material_repo, _, _ = _setup()
        create = CreateWorkOrderHandler(work_order_repo, material_repo)
        create.handle("BT-001", "PAN-18")
        with pytest.raises(ValidationError):
            create.handle(" bt-001 ", "PAN-18")

    def test_create_with_unknown_material(self):
        work_order_repo, material_repo, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            CreateWorkOrderHandler(work_order_repo, material_repo).handle("BT-9", "NOPE")
