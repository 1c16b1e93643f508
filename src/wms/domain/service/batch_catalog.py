"""Domain service: Inventory Batch Catalog.

Projects the raw inventory store into allocation-ready batches.  A batch
is offered for planning only when it is

- in PUTAWAY status (received/staging/damaged stock is not shelved yet),
- for exactly the requested item: both id *and* code must match, a row
  whose code disagrees with its item id is treated as corrupt,
- not sitting in a staging/preparation location,
- holding some available quantity.

Location labels are resolved best-effort; a failed lookup falls back to
a synthetic ``LOC-<id>`` label and never aborts the allocation.

When built with a reservation sink, stock already reserved by the lines
being planned is credited back, so re-planning a confirmed line sees the
units it is about to release.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal

from wms.domain.exceptions import DataUnavailable
from wms.domain.model.inventory import InventoryBatch, InventoryStatus
from wms.domain.model.location import Location, StagingPolicy
from wms.domain.model.order import OrderLine
from wms.domain.model.value_objects import ZERO
from wms.domain.repository.inventory_source import InventorySource
from wms.domain.repository.location_source import LocationSource
from wms.domain.repository.reservation_sink import ReservationSink

logger = logging.getLogger(__name__)


class BatchCatalog:

    def __init__(
        self,
        inventory_source: InventorySource,
        location_source: LocationSource,
        staging_policy: StagingPolicy | None = None,
        reservation_sink: ReservationSink | None = None,
    ) -> None:
        self._inventory_source = inventory_source
        self._location_source = location_source
        self._staging_policy = staging_policy or StagingPolicy()
        self._reservation_sink = reservation_sink

    def list_available_batches(
        self,
        item_ids: Iterable[int],
        expected_codes: Mapping[int, str] | None = None,
        timeout: float | None = None,
        held: Mapping[int, Decimal] | None = None,
    ) -> list[InventoryBatch]:
        """Return allocatable batches of the given items, ordered by batch id.

        ``expected_codes`` maps item id -> item code as the order lines
        know it; batches whose code disagrees are rejected.

        ``held`` maps batch id -> quantity reserved by the caller itself;
        that quantity counts as available again.

        Raises DataUnavailable if the inventory store cannot be read, so
        "store down" is never confused with "genuinely no stock".
        """
        wanted = set(item_ids)
        if not wanted:
            return []

        raw_batches = self._inventory_source.fetch_batches(wanted, timeout=timeout)
        locations: dict[int, Location] = {}
        result: list[InventoryBatch] = []

        for batch in raw_batches:
            if batch.item_id not in wanted:
                continue
            if batch.status != InventoryStatus.PUTAWAY:
                continue
            if expected_codes is not None and not self._code_matches(
                batch, expected_codes.get(batch.item_id)
            ):
                continue
            if held and batch.id in held:
                batch = self._credit(batch, held[batch.id])
            if batch.available_quantity <= ZERO:
                continue

            location = locations.get(batch.location_id)
            if location is None:
                location = self._resolve_location(batch)
                locations[batch.location_id] = location
            if self._staging_policy.is_staging(location):
                continue

            result.append(dataclasses.replace(batch, location_code=location.code))

        result.sort(key=lambda b: b.id)
        logger.info(
            "Catalog: %d of %d batch rows allocatable for %d item(s)",
            len(result), len(raw_batches), len(wanted),
        )
        return result

    def batches_for_lines(
        self, lines: Iterable[OrderLine], timeout: float | None = None
    ) -> list[InventoryBatch]:
        """Convenience wrapper taking item ids and codes from order lines."""
        lines = list(lines)
        expected = {line.item_id: line.item_code for line in lines}
        return self.list_available_batches(
            expected.keys(),
            expected,
            timeout=timeout,
            held=self._held_by([line.line_id for line in lines]),
        )

    # --- Internal helpers -----------------------------------------------------

    def _held_by(self, line_ids: list[int]) -> dict[int, Decimal]:
        if self._reservation_sink is None:
            return {}
        held: dict[int, Decimal] = {}
        for r in self._reservation_sink.list_reservations(line_ids):
            held[r.batch_id] = held.get(r.batch_id, ZERO) + r.quantity
        return held

    @staticmethod
    def _credit(batch: InventoryBatch, quantity: Decimal) -> InventoryBatch:
        allocated = max(ZERO, batch.allocated_quantity - quantity)
        return dataclasses.replace(batch, allocated_quantity=allocated)

    @staticmethod
    def _code_matches(batch: InventoryBatch, expected_code: str | None) -> bool:
        if expected_code is None or batch.item_code == expected_code:
            return True
        logger.warning(
            "Rejecting batch #%d: item code %r does not match expected %r "
            "for item id %d",
            batch.id, batch.item_code, expected_code, batch.item_id,
        )
        return False

    def _resolve_location(self, batch: InventoryBatch) -> Location:
        try:
            location = self._location_source.resolve(batch.location_id)
        except (DataUnavailable, LookupError, OSError, TypeError, ValueError) as exc:
            logger.warning(
                "Location #%d lookup failed (%s); using synthetic code",
                batch.location_id, exc,
            )
            location = None

        if location is None:
            # The row's own label is better than nothing.
            if batch.location_code:
                return Location(id=batch.location_id, code=batch.location_code)
            return Location.synthetic(batch.location_id)
        return location
