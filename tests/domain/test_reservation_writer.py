"""Unit tests for ReservationWriter (confirming a plan against the store)."""

import threading
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from wms.domain.exceptions import DataUnavailable, InvalidArgument
from wms.domain.model.allocation import AllocationMethod
from wms.domain.model.inventory import InventoryStatus
from wms.domain.service.allocation_planner import plan
from wms.domain.service.reservation_writer import ReservationWriter
from tests.fakes import FakeInventoryStore, make_batch, make_line

AS_OF = date(2024, 12, 1)
NOW = datetime(2024, 12, 1, 9, 30, tzinfo=timezone.utc)


def _writer(store):
    return ReservationWriter(store, store, clock=lambda: NOW)


def _plan(store, line_id=1, qty=10):
    snapshot = store.fetch_batches([1])
    return plan(make_line(line_id, qty=qty), AllocationMethod.FIFO, snapshot, AS_OF)


class TestConfirm:

    def test_commits_every_draw(self):
        store = FakeInventoryStore([make_batch(1, 6, pallet_id="P-1"), make_batch(2, 10)])
        result = _plan(store, qty=9)

        report = _writer(store).confirm([result])

        assert report.is_complete
        assert report.total_committed == Decimal("9")
        assert store.batch(1).allocated_quantity == Decimal("6")
        assert store.batch(2).allocated_quantity == Decimal("3")

        reservations = store.list_reservations([1])
        assert [(r.batch_id, r.quantity) for r in reservations] == [
            (1, Decimal("6")),
            (2, Decimal("3")),
        ]
        assert reservations[0].reserved_at == NOW
        assert reservations[0].method == AllocationMethod.FIFO
        assert reservations[0].pallet_id == "P-1"

    def test_confirm_is_idempotent(self):
        store = FakeInventoryStore([make_batch(1, 20)])
        result = _plan(store, qty=8)
        writer = _writer(store)

        writer.confirm([result])
        second = writer.confirm([result])

        assert store.batch(1).allocated_quantity == Decimal("8")
        assert len(store.list_reservations()) == 1
        assert second.released_quantity == Decimal("8")

    def test_revised_plan_replaces_old_reservations(self):
        store = FakeInventoryStore([make_batch(1, 20)])
        writer = _writer(store)
        writer.confirm([_plan(store, qty=8)])

        revised = plan(make_line(1, qty=5), AllocationMethod.FIFO, [make_batch(1, 20)], AS_OF)
        writer.confirm([revised])

        assert store.batch(1).allocated_quantity == Decimal("5")
        assert [r.quantity for r in store.list_reservations([1])] == [Decimal("5")]

    def test_other_lines_reservations_untouched(self):
        store = FakeInventoryStore([make_batch(1, 20)])
        writer = _writer(store)
        writer.confirm([_plan(store, line_id=1, qty=4)])
        writer.confirm([_plan(store, line_id=2, qty=6)])

        assert store.batch(1).allocated_quantity == Decimal("10")
        assert {r.line_id for r in store.list_reservations()} == {1, 2}

    def test_stale_draw_fails_alone(self):
        store = FakeInventoryStore([make_batch(1, 5), make_batch(2, 5)])
        result = _plan(store, qty=10)
        store.batch(1).shipped_quantity = Decimal("3")

        report = _writer(store).confirm([result])

        assert not report.is_complete
        assert [o.batch_id for o in report.committed] == [2]
        failed = report.failed[0]
        assert failed.batch_id == 1
        assert "need 5, have 2 available" in failed.error
        assert store.batch(1).allocated_quantity == Decimal("0")
        assert store.batch(2).allocated_quantity == Decimal("5")

    def test_batch_that_left_putaway_fails_draw(self):
        store = FakeInventoryStore([make_batch(1, 5), make_batch(2, 5)])
        result = _plan(store, qty=8)
        store.batch(1).status = InventoryStatus.DAMAGED

        report = _writer(store).confirm([result])

        assert [o.batch_id for o in report.failed] == [1]
        assert "have 0 available" in report.failed[0].error
        assert store.batch(1).allocated_quantity == Decimal("0")
        assert store.batch(2).allocated_quantity == Decimal("3")

    def test_vanished_batch_fails_draw(self):
        store = FakeInventoryStore([make_batch(2, 5)])
        result = plan(make_line(qty=3), AllocationMethod.FIFO, [make_batch(9, 5)], AS_OF)

        report = _writer(store).confirm([result])

        assert report.failed[0].batch_id == 9
        assert "have 0 available" in report.failed[0].error

    def test_duplicate_lines_rejected(self):
        store = FakeInventoryStore([make_batch(1, 20)])
        result = _plan(store, qty=2)
        with pytest.raises(InvalidArgument, match="one result per line"):
            _writer(store).confirm([result, result])

    def test_shortfall_only_commits_planned_quantity(self):
        store = FakeInventoryStore([make_batch(1, 4)])
        report = _writer(store).confirm([_plan(store, qty=10)])
        assert report.total_committed == Decimal("4")

    def test_store_errors_propagate(self):
        store = FakeInventoryStore([make_batch(1, 4)])
        result = _plan(store, qty=2)

        class BrokenSink(FakeInventoryStore):
            def delete_reservations(self, line_ids, timeout=None):
                raise DataUnavailable("reservation store is down")

        with pytest.raises(DataUnavailable):
            ReservationWriter(store, BrokenSink()).confirm([result])


class TestConcurrentConfirm:

    def test_only_one_plan_wins_the_last_units(self):
        store = FakeInventoryStore([make_batch(1, 10)])
        plan_a = _plan(store, line_id=1, qty=10)
        plan_b = _plan(store, line_id=2, qty=10)
        barrier = threading.Barrier(2)
        reports = {}

        def run(name, result):
            writer = _writer(store)
            barrier.wait()
            reports[name] = writer.confirm([result])

        threads = [
            threading.Thread(target=run, args=("a", plan_a)),
            threading.Thread(target=run, args=("b", plan_b)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        outcomes = sorted(r.is_complete for r in reports.values())
        assert outcomes == [False, True]
        loser = next(r for r in reports.values() if not r.is_complete)
        assert "Insufficient stock in batch #1" in loser.failed[0].error
        assert store.batch(1).allocated_quantity == Decimal("10")
        assert len(store.list_reservations()) == 1
