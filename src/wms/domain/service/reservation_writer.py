"""Domain service: Reservation Writer.

The only component with side effects.  Commits a confirmed plan by
turning each draw into a reservation row and advancing the batch's
allocated counter.

``confirm`` is delete-then-insert: every existing reservation of the
plan's lines is released first, so replaying an unchanged plan is
idempotent and replaying a revised plan never double-books.

Unlike a two-phase validate-then-mutate reservation, confirmation is
per draw: a draw that lost a race for stock fails with InsufficientStock
while its siblings still commit.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from wms.domain.exceptions import InsufficientStock, InvalidArgument
from wms.domain.model.allocation import AllocationDraw, AllocationResult
from wms.domain.model.inventory import InventoryStatus
from wms.domain.model.reservation import CommitReport, DrawOutcome, Reservation
from wms.domain.model.value_objects import ZERO
from wms.domain.repository.inventory_source import InventorySource
from wms.domain.repository.reservation_sink import ReservationSink

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReservationWriter:

    def __init__(
        self,
        inventory_source: InventorySource,
        reservation_sink: ReservationSink,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._inventory_source = inventory_source
        self._reservation_sink = reservation_sink
        self._clock = clock

    def confirm(
        self, results: Iterable[AllocationResult], timeout: float | None = None
    ) -> CommitReport:
        """Commit every draw of the plan and report each one's fate.

        DataUnavailable / StoreTimeout from the store abort the call;
        InsufficientStock only fails the affected draw.
        """
        results = list(results)
        line_ids = [r.line_id for r in results]
        if len(set(line_ids)) != len(line_ids):
            raise InvalidArgument("A plan may hold only one result per line")

        released = self._reservation_sink.delete_reservations(line_ids, timeout=timeout)
        released_qty = sum((r.quantity for r in released), ZERO)
        if released:
            logger.info(
                "Released %d previous reservation(s) totalling %s for %d line(s)",
                len(released), released_qty, len(line_ids),
            )

        outcomes: list[DrawOutcome] = []
        for result in results:
            for draw in result.draws:
                outcomes.append(self._commit_draw(result, draw, timeout))

        report = CommitReport(outcomes=tuple(outcomes), released_quantity=released_qty)
        logger.info(
            "Confirmed %d of %d draw(s), %s units reserved",
            len(report.committed), len(outcomes), report.total_committed,
        )
        return report

    # --- Internal helpers -----------------------------------------------------

    def _commit_draw(
        self, result: AllocationResult, draw: AllocationDraw, timeout: float | None
    ) -> DrawOutcome:
        outcome = DrawOutcome(
            line_id=result.line_id,
            batch_id=draw.batch_id,
            allocation_order=draw.allocation_order,
            quantity=draw.allocated_quantity,
        )

        # Cheap re-read first; the sink repeats the check atomically.
        batch = self._inventory_source.get_batch(draw.batch_id, timeout=timeout)
        # Stock that left PUTAWAY since planning counts as gone.
        if batch is None or batch.status != InventoryStatus.PUTAWAY:
            available = ZERO
        else:
            available = batch.available_quantity
        if available < draw.allocated_quantity:
            return self._failed(
                outcome, InsufficientStock(draw.batch_id, draw.allocated_quantity, available)
            )

        reservation = Reservation(
            batch_id=draw.batch_id,
            line_id=result.line_id,
            item_id=result.item_id,
            location_id=draw.location_id,
            quantity=draw.allocated_quantity,
            method=result.method,
            reserved_at=self._clock(),
            batch_number=draw.batch_number,
            pallet_id=draw.pallet_id,
        )
        try:
            stored = self._reservation_sink.insert_reservation(reservation, timeout=timeout)
        except InsufficientStock as exc:
            return self._failed(outcome, exc)

        return dataclasses.replace(outcome, reservation=stored)

    @staticmethod
    def _failed(outcome: DrawOutcome, exc: InsufficientStock) -> DrawOutcome:
        logger.warning(
            "Line #%d draw %d failed: %s", outcome.line_id, outcome.allocation_order, exc
        )
        return dataclasses.replace(outcome, error=str(exc))
