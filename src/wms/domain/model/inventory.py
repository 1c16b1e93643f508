"""InventoryBatch: one physical lot of one item at one location.

Batches are created on receipt/putaway by the warehouse, mutated only by
reservation and shipment, and never deleted: a depleted batch is kept as
a historical record and simply drops out of planning.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from wms.domain.exceptions import InsufficientStock, InvalidArgument
from wms.domain.model.value_objects import ZERO

EXPIRING_SOON_DAYS = 30


class InventoryStatus(Enum):
    RECEIVED = "received"
    STAGING = "staging"
    PUTAWAY = "putaway"
    DAMAGED = "damaged"
    SHIPPED = "shipped"


class ExpiryStatus(Enum):
    OK = "OK"
    EXPIRING_SOON = "EXPIRING_SOON"
    EXPIRED = "EXPIRED"


def expiry_status(expiry_date: date | None, as_of: date) -> ExpiryStatus:
    """Classify a batch by how close it is to expiry.

    Batches without an expiry date never expire.
    """
    if expiry_date is None:
        return ExpiryStatus.OK
    days_left = (expiry_date - as_of).days
    if days_left < 0:
        return ExpiryStatus.EXPIRED
    if days_left <= EXPIRING_SOON_DAYS:
        return ExpiryStatus.EXPIRING_SOON
    return ExpiryStatus.OK


@dataclass
class InventoryBatch:
    """Aggregate root for lot-level stock.

    Invariants:
    - ``available_quantity`` is never negative
    - ``available_quantity`` never exceeds ``on_hand_quantity``
    """

    id: int
    item_id: int
    item_code: str
    location_id: int
    on_hand_quantity: Decimal
    batch_number: str | None = None
    location_code: str | None = None
    pallet_id: str | None = None
    manufacturing_date: date | None = None
    expiry_date: date | None = None
    allocated_quantity: Decimal = ZERO
    shipped_quantity: Decimal = ZERO
    status: InventoryStatus = InventoryStatus.PUTAWAY
    received_at: datetime | None = None

    def __post_init__(self) -> None:
        for name in ("on_hand_quantity", "allocated_quantity", "shipped_quantity"):
            if getattr(self, name) < ZERO:
                raise InvalidArgument(f"Batch #{self.id}: {name} cannot be negative")

    @property
    def available_quantity(self) -> Decimal:
        return max(
            ZERO,
            self.on_hand_quantity - self.allocated_quantity - self.shipped_quantity,
        )

    def matches_batch_number(self, batch_number: str | None) -> bool:
        if not batch_number or not self.batch_number:
            return False
        return self.batch_number.upper() == batch_number.upper()

    def reserve(self, quantity: Decimal) -> None:
        """Claim stock for an order line.

        Raises InsufficientStock if the batch no longer has enough available.
        """
        if quantity <= ZERO:
            raise InvalidArgument("Reservation quantity must be positive")
        if quantity > self.available_quantity:
            raise InsufficientStock(self.id, quantity, self.available_quantity)
        self.allocated_quantity += quantity

    def release(self, quantity: Decimal) -> None:
        """Give back previously reserved stock (re-allocation or cancellation)."""
        if quantity <= ZERO:
            raise InvalidArgument("Release quantity must be positive")
        if quantity > self.allocated_quantity:
            raise InvalidArgument(
                f"Cannot release {quantity} from batch #{self.id} "
                f"- only {self.allocated_quantity} currently allocated"
            )
        self.allocated_quantity -= quantity
