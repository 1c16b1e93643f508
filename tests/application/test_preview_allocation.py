"""Integration tests for the PreviewAllocation use case."""

from datetime import date
from decimal import Decimal

import pytest

from wms.application.dto import OrderLineSpec
from wms.application.preview_allocation import PreviewAllocationHandler
from wms.domain.exceptions import DataUnavailable, InvalidArgument
from wms.domain.model.allocation import AllocationMethod
from wms.domain.model.item import Item
from wms.domain.model.location import Location
from wms.domain.service.batch_catalog import BatchCatalog
from tests.fakes import (
    FakeInventoryStore,
    FakeItemSource,
    FakeLocationSource,
    make_batch,
    make_line,
)

AS_OF = date(2024, 12, 1)


def _setup():
    items = [
        Item(id=1, code="CC5001", name="Cold cream", batch_tracked=True),
        Item(id=2, code="SOAP-250", name="Soap 250g"),
        Item(id=3, code="BOLT-M8", name="Bolt M8"),
        Item(id=4, code="GLUE", name="Glue"),
    ]
    batches = [
        make_batch(1, 50, item_id=1, item_code="CC5001", batch_number="B1", location_id=100),
        make_batch(2, 20, item_id=2, item_code="SOAP-250", expiry=date(2025, 6, 1),
                   location_id=100),
        make_batch(3, 20, item_id=2, item_code="SOAP-250", expiry=date(2025, 1, 1),
                   location_id=200),
        make_batch(4, 10, item_id=3, item_code="BOLT-M8", location_id=200),
        make_batch(5, 30, item_id=3, item_code="BOLT-M8", location_id=300),
    ]
    locations = [
        Location(id=100, code="A-01-01"),
        Location(id=200, code="B-01-01"),
        Location(id=300, code="STAGE-OUT"),
    ]
    store = FakeInventoryStore(batches)
    catalog = BatchCatalog(store, FakeLocationSource(locations))
    handler = PreviewAllocationHandler(FakeItemSource(items), catalog)
    return handler, store


class TestPreviewHappyPath:

    def test_each_line_gets_its_own_method(self):
        handler, _ = _setup()

        preview = handler.handle(
            [
                OrderLineSpec(1, "CC5001", "30"),
                OrderLineSpec(2, "SOAP-250", "25"),
                OrderLineSpec(3, "BOLT-M8", "15"),
            ],
            as_of=AS_OF,
        )

        methods = [r.method for r in preview.results]
        assert methods == [AllocationMethod.BATCH, AllocationMethod.FEFO, AllocationMethod.FIFO]

        soap = preview.results[1]
        assert [(d.batch_id, d.allocated_quantity) for d in soap.draws] == [
            (3, Decimal("20")),
            (2, Decimal("5")),
        ]
        # Batch 5 sits in a staging location.
        bolts = preview.results[2]
        assert [d.batch_id for d in bolts.draws] == [4]
        assert bolts.shortfall == Decimal("5")

        assert not preview.report.is_complete
        assert preview.report.shortfall_messages() == ["BOLT-M8: 5 units short"]

    def test_item_codes_resolved_case_insensitively(self):
        handler, _ = _setup()
        preview = handler.handle([OrderLineSpec(1, "cc5001", "5")], as_of=AS_OF)
        assert preview.lines[0].item_code == "CC5001"
        assert preview.report.is_complete

    def test_no_stock_is_reported_not_raised(self):
        handler, _ = _setup()
        preview = handler.handle([OrderLineSpec(1, "GLUE", "4")], as_of=AS_OF)
        assert preview.results[0].draws == ()
        assert preview.report.unallocated == 1

    def test_preview_writes_nothing(self):
        handler, store = _setup()
        handler.handle([OrderLineSpec(1, "SOAP-250", "25")], as_of=AS_OF)
        assert store.batch(2).allocated_quantity == Decimal("0")
        assert store.list_reservations() == []

    def test_repeated_preview_is_identical(self):
        handler, _ = _setup()
        specs = [OrderLineSpec(1, "SOAP-250", "25"), OrderLineSpec(2, "BOLT-M8", "3")]
        first = handler.handle(specs, as_of=AS_OF)
        second = handler.handle(specs, as_of=AS_OF)
        assert first.results == second.results

    def test_pinned_batch_line(self):
        handler, _ = _setup()
        preview = handler.handle([OrderLineSpec(1, "SOAP-250", "5", "b1")], as_of=AS_OF)
        # No SOAP batch carries number B1, so expiry decides.
        assert preview.results[0].method == AllocationMethod.FEFO


class TestMultiLineOrders:

    def test_two_lines_same_item_share_stock(self):
        handler, _ = _setup()

        preview = handler.handle(
            [OrderLineSpec(1, "BOLT-M8", "6"), OrderLineSpec(2, "BOLT-M8", "6")],
            as_of=AS_OF,
        )

        first, second = preview.results
        assert first.total_allocated == Decimal("6")
        assert second.total_allocated == Decimal("4")
        assert second.shortfall == Decimal("2")

    def test_picking_list_groups_by_location(self):
        handler, _ = _setup()
        preview = handler.handle(
            [OrderLineSpec(1, "CC5001", "10"), OrderLineSpec(2, "SOAP-250", "25")],
            as_of=AS_OF,
        )
        assert [(s.location_id, s.total_quantity) for s in preview.picking] == [
            (100, Decimal("15")),
            (200, Decimal("20")),
        ]


class TestMethodOverride:

    def test_pinned_method_applies_to_every_line(self):
        handler, _ = _setup()
        preview = handler.handle(
            [OrderLineSpec(1, "SOAP-250", "25"), OrderLineSpec(2, "CC5001", "1")],
            method=AllocationMethod.FIFO,
            as_of=AS_OF,
        )
        assert {r.method for r in preview.results} == {AllocationMethod.FIFO}
        # FIFO ignores expiry and falls back to batch id.
        assert [d.batch_id for d in preview.results[0].draws] == [2, 3]


class TestPreviewValidation:

    def test_unknown_item_code_rejected(self):
        handler, _ = _setup()
        with pytest.raises(InvalidArgument, match="Unknown item: 'NOPE'"):
            handler.handle([OrderLineSpec(1, "NOPE", "1")])

    def test_zero_quantity_rejected(self):
        handler, _ = _setup()
        with pytest.raises(InvalidArgument, match="must be positive"):
            handler.handle([OrderLineSpec(1, "GLUE", "0")])

    def test_bad_quantity_rejected(self):
        handler, _ = _setup()
        with pytest.raises(InvalidArgument, match="Invalid quantity"):
            handler.handle([OrderLineSpec(1, "GLUE", "many")])

    def test_empty_order_rejected(self):
        handler, _ = _setup()
        with pytest.raises(InvalidArgument, match="at least one line"):
            handler.handle([])

    def test_duplicate_line_ids_rejected(self):
        handler, _ = _setup()
        with pytest.raises(InvalidArgument, match="unique"):
            handler.handle([OrderLineSpec(1, "GLUE", "1"), OrderLineSpec(1, "BOLT-M8", "1")])

    def test_line_for_unconfigured_item_rejected(self):
        handler, _ = _setup()
        with pytest.raises(InvalidArgument, match="Unknown item #99"):
            handler.preview([make_line(1, item_id=99, item_code="GHOST")], as_of=AS_OF)

    def test_item_source_down_surfaces(self):
        items = FakeItemSource([Item(id=1, code="X", name="X")])
        items.unavailable = True
        store = FakeInventoryStore([make_batch(1)])
        handler = PreviewAllocationHandler(items, BatchCatalog(store, FakeLocationSource()))

        with pytest.raises(DataUnavailable, match="item master is down"):
            handler.preview([make_line()], as_of=AS_OF)
        with pytest.raises(DataUnavailable, match="item master is down"):
            handler.handle([OrderLineSpec(1, "X", "1")], as_of=AS_OF)

    def test_store_down_surfaces(self):
        handler, store = _setup()
        store.unavailable = True
        with pytest.raises(DataUnavailable):
            handler.handle([OrderLineSpec(1, "GLUE", "1")], as_of=AS_OF)


class TestPreviewDTO:

    def test_dto_shows_expiry_status(self):
        handler, _ = _setup()
        preview = handler.handle(
            [OrderLineSpec(1, "SOAP-250", "25")], as_of=date(2024, 12, 15)
        )

        dto = PreviewAllocationHandler.to_dto(preview)

        line = dto.lines[0]
        assert line.method == "FEFO"
        assert (line.ordered, line.allocated, line.shortfall) == ("25", "25", "0")
        assert [d.expiry for d in line.draws] == [
            "2025-01-01 (EXPIRING_SOON)",
            "2025-06-01 (OK)",
        ]
        assert line.draws[0].location_code == "B-01-01"
        assert line.draws[0].batch_number == "-"
        assert dto.is_complete
        assert dto.summary == "All 1 line(s) fully allocated using 2 batch draw(s)"
        assert [(s.location_code, s.quantity) for s in dto.picking] == [
            ("A-01-01", "5"),
            ("B-01-01", "20"),
        ]
