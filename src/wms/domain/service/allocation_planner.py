"""Domain service: Allocation Planner.

Given a method, an order line and a snapshot of candidate batches,
greedily draws from batches in priority order until the line is covered
or the pool runs dry.  The planner is a pure function: it never mutates
the snapshot, so repeated previews over the same snapshot yield the same
plan.  Stale quantities are caught later, at confirmation time.

Priority order per method (ties always broken by ascending batch id):

- BATCH: manufacturing date ascending, then receipt order; restricted to
  the pinned batch number when the line pins one that is in stock.
- FEFO:  batches expiring after ``as_of`` by expiry ascending, then
  batches with no or past expiry in FIFO order (drawn only as last resort).
- FIFO:  manufacturing date ascending, then receipt order.

Missing dates always sort last.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal

from wms.domain.exceptions import InvalidArgument
from wms.domain.model.allocation import AllocationDraw, AllocationMethod, AllocationResult
from wms.domain.model.inventory import InventoryBatch
from wms.domain.model.order import OrderLine
from wms.domain.model.value_objects import ZERO, Quantity
from wms.domain.service.strategy_selector import has_pinned_batch

logger = logging.getLogger(__name__)


# --- Sort keys ----------------------------------------------------------------


def _fifo_key(batch: InventoryBatch) -> tuple:
    mfg = batch.manufacturing_date
    received = batch.received_at
    return (
        mfg is None,
        mfg or date.min,
        received is None,
        received or datetime.min,
        batch.id,
    )


def _fefo_key(batch: InventoryBatch, as_of: date) -> tuple:
    if batch.expiry_date is not None and batch.expiry_date > as_of:
        return (0, batch.expiry_date, batch.id)
    return (1,) + _fifo_key(batch)


def sort_batches(
    method: AllocationMethod,
    batches: Iterable[InventoryBatch],
    as_of: date | None = None,
) -> list[InventoryBatch]:
    """Return the batches in the order ``method`` draws from them."""
    if method == AllocationMethod.FEFO:
        today = as_of or date.today()
        return sorted(batches, key=lambda b: _fefo_key(b, today))
    return sorted(batches, key=_fifo_key)


# --- Planning -----------------------------------------------------------------


def candidate_pool(
    line: OrderLine,
    method: AllocationMethod,
    batches: Iterable[InventoryBatch],
) -> list[InventoryBatch]:
    """Batches of the line's exact item that still hold stock."""
    pool = [b for b in batches if line.accepts(b) and b.available_quantity > ZERO]
    if method == AllocationMethod.BATCH and has_pinned_batch(line, pool):
        pool = [b for b in pool if b.matches_batch_number(line.required_batch_number)]
    return pool


def plan(
    line: OrderLine,
    method: AllocationMethod,
    candidate_batches: list[InventoryBatch],
    as_of: date | None = None,
) -> AllocationResult:
    """Build the allocation result for one line.

    An empty pool is not an error: the result simply carries the full
    ordered quantity as shortfall.
    """
    if not isinstance(line.ordered_quantity, Quantity):
        raise InvalidArgument(f"Line #{line.line_id}: ordered quantity must be positive")
    if not isinstance(method, AllocationMethod):
        raise InvalidArgument(f"Unknown allocation method: {method!r}")

    ordered = line.ordered_quantity.value
    remaining = ordered
    draws: list[AllocationDraw] = []

    for batch in sort_batches(method, candidate_pool(line, method, candidate_batches), as_of):
        if remaining <= ZERO:
            break
        take = min(remaining, batch.available_quantity)
        if take <= ZERO:
            continue
        draws.append(
            AllocationDraw(
                batch_id=batch.id,
                allocated_quantity=take,
                allocation_order=len(draws) + 1,
                location_id=batch.location_id,
                batch_number=batch.batch_number,
                location_code=batch.location_code,
                pallet_id=batch.pallet_id,
                expiry_date=batch.expiry_date,
                manufacturing_date=batch.manufacturing_date,
            )
        )
        remaining -= take

    result = AllocationResult(
        line_id=line.line_id,
        item_id=line.item_id,
        item_code=line.item_code,
        method=method,
        ordered_quantity=ordered,
        draws=tuple(draws),
    )
    if result.shortfall > ZERO:
        logger.warning(
            "Line #%d (%s): short %s of %s after %d draw(s)",
            line.line_id, line.item_code, result.shortfall, ordered, len(draws),
        )
    return result


def remaining_after(
    batches: Iterable[InventoryBatch], results: Iterable[AllocationResult]
) -> list[InventoryBatch]:
    """Return copies of ``batches`` with the results' draws already taken.

    Lets several lines of one order share a snapshot without booking the
    same units twice.  The input batches are left untouched.
    """
    drawn: dict[int, Decimal] = {}
    for result in results:
        for draw in result.draws:
            drawn[draw.batch_id] = drawn.get(draw.batch_id, ZERO) + draw.allocated_quantity

    adjusted: list[InventoryBatch] = []
    for batch in batches:
        taken = drawn.get(batch.id)
        if taken:
            batch = dataclasses.replace(
                batch, allocated_quantity=batch.allocated_quantity + taken
            )
        adjusted.append(batch)
    return adjusted
