"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from wms.domain.exceptions import InvalidArgument
from wms.domain.model.inventory import expiry_status
from wms.domain.repository.inventory_source import InventorySource
from wms.domain.repository.item_source import ItemSource


@dataclass(frozen=True)
class BatchLineDTO:
    batch_id: int
    item_code: str
    batch_number: str
    location_id: int
    status: str
    on_hand: str
    allocated: str
    shipped: str
    available: str
    expiry: str


class ShowInventoryHandler:

    def __init__(self, inventory_source: InventorySource, item_source: ItemSource) -> None:
        self._inventory_source = inventory_source
        self._item_source = item_source

    def handle(
        self, item_code: str | None = None, as_of: date | None = None
    ) -> list[BatchLineDTO]:
        """List raw batches (every status), optionally for one item."""
        if item_code:
            item = self._item_source.get_by_code(item_code)
            if item is None:
                raise InvalidArgument(f"Unknown item: '{item_code}'")
            item_ids = [item.id]
        else:
            item_ids = [i.id for i in self._item_source.list_all()]

        as_of = as_of or date.today()
        batches = sorted(self._inventory_source.fetch_batches(item_ids), key=lambda b: b.id)
        return [
            BatchLineDTO(
                batch_id=b.id,
                item_code=b.item_code,
                batch_number=b.batch_number or "-",
                location_id=b.location_id,
                status=b.status.value,
                on_hand=str(b.on_hand_quantity),
                allocated=str(b.allocated_quantity),
                shipped=str(b.shipped_quantity),
                available=str(b.available_quantity),
                expiry=(
                    f"{b.expiry_date.isoformat()} {expiry_status(b.expiry_date, as_of).value}"
                    if b.expiry_date
                    else "-"
                ),
            )
            for b in batches
        ]
