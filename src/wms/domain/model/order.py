"""OrderLine: one item/quantity requirement within an outbound order.

Lines are immutable once created; the allocation planner only reads them.
The order status workflow itself lives outside this package.
"""

from __future__ import annotations

from dataclasses import dataclass

from wms.domain.model.inventory import InventoryBatch
from wms.domain.model.value_objects import Quantity


@dataclass(frozen=True)
class OrderLine:
    """A requirement the planner must cover.

    ``required_batch_number`` pins the line to an explicit batch when set.
    """

    line_id: int
    item_id: int
    item_code: str
    ordered_quantity: Quantity
    required_batch_number: str | None = None

    def accepts(self, batch: InventoryBatch) -> bool:
        """True if the batch holds exactly this line's item (id and code)."""
        return batch.item_id == self.item_id and batch.item_code == self.item_code
