"""Reservation records and the per-draw commit report."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from wms.domain.model.allocation import AllocationMethod
from wms.domain.model.value_objects import ZERO


@dataclass(frozen=True)
class Reservation:
    """A committed claim against a batch on behalf of one order line."""

    batch_id: int
    line_id: int
    item_id: int
    location_id: int
    quantity: Decimal
    method: AllocationMethod
    reserved_at: datetime
    batch_number: str | None = None
    pallet_id: str | None = None


@dataclass(frozen=True)
class DrawOutcome:
    line_id: int
    batch_id: int
    allocation_order: int
    quantity: Decimal
    reservation: Reservation | None = None
    error: str | None = None

    @property
    def committed(self) -> bool:
        return self.reservation is not None


@dataclass(frozen=True)
class CommitReport:
    """Per-draw breakdown of a confirm call.

    Confirmation is deliberately not all-or-nothing: a failed draw does
    not roll back its siblings.
    """

    outcomes: tuple[DrawOutcome, ...] = ()
    released_quantity: Decimal = ZERO

    @property
    def committed(self) -> list[DrawOutcome]:
        return [o for o in self.outcomes if o.committed]

    @property
    def failed(self) -> list[DrawOutcome]:
        return [o for o in self.outcomes if not o.committed]

    @property
    def total_committed(self) -> Decimal:
        return sum((o.quantity for o in self.committed), ZERO)

    @property
    def is_complete(self) -> bool:
        return not self.failed
