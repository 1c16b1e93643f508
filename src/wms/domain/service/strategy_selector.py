"""Domain service: Strategy Selector.

Picks the allocation method for one order line.  The decision table is
evaluated top to bottom and the first matching rule wins:

1. pinned batch number present in the pool with stock  -> BATCH
2. item is batch-tracked                                -> BATCH
3. any candidate batch expires strictly after ``as_of`` -> FEFO
4. otherwise                                            -> FIFO

Selection is per line: two lines of one order may use different methods.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

from wms.domain.exceptions import InvalidArgument
from wms.domain.model.allocation import AllocationMethod
from wms.domain.model.inventory import InventoryBatch
from wms.domain.model.item import Item
from wms.domain.model.order import OrderLine
from wms.domain.model.value_objects import ZERO

logger = logging.getLogger(__name__)


def has_pinned_batch(line: OrderLine, batches: Iterable[InventoryBatch]) -> bool:
    """True if the line's pinned batch number is available in the pool."""
    if not line.required_batch_number:
        return False
    return any(
        line.accepts(b)
        and b.matches_batch_number(line.required_batch_number)
        and b.available_quantity > ZERO
        for b in batches
    )


def has_future_expiry(
    line: OrderLine, batches: Iterable[InventoryBatch], as_of: date
) -> bool:
    return any(
        line.accepts(b) and b.expiry_date is not None and b.expiry_date > as_of
        for b in batches
    )


def select_method(
    line: OrderLine,
    candidate_batches: list[InventoryBatch],
    item: Item,
    as_of: date | None = None,
) -> AllocationMethod:
    """Return the method the planner must use for ``line``."""
    if item.id != line.item_id:
        raise InvalidArgument(
            f"Item #{item.id} does not belong to line #{line.line_id} "
            f"(expects item #{line.item_id})"
        )
    as_of = as_of or date.today()

    if has_pinned_batch(line, candidate_batches):
        method, reason = AllocationMethod.BATCH, "pinned batch available"
    elif item.batch_tracked:
        method, reason = AllocationMethod.BATCH, "item is batch-tracked"
    elif has_future_expiry(line, candidate_batches, as_of):
        method, reason = AllocationMethod.FEFO, "valid expiry dates present"
    else:
        method, reason = AllocationMethod.FIFO, "no usable expiry data"

    logger.info(
        "Line #%d (%s): %s (%s)", line.line_id, line.item_code, method.value, reason
    )
    return method
