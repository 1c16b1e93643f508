"""Allocation plan records: draws, per-line results and the coverage report.

These are the outputs of the pure planning pipeline.  Nothing here is
persisted until the operator confirms the plan.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from wms.domain.model.value_objects import ZERO


class AllocationMethod(Enum):
    BATCH = "BATCH"
    FEFO = "FEFO"
    FIFO = "FIFO"


@dataclass(frozen=True)
class AllocationDraw:
    """One slice of a line's fulfillment, taken from one batch.

    Batch attributes are copied at planning time so the draw stays
    readable after the batch snapshot is gone.
    """

    batch_id: int
    allocated_quantity: Decimal
    allocation_order: int  # 1-based within the line
    location_id: int
    batch_number: str | None = None
    location_code: str | None = None
    pallet_id: str | None = None
    expiry_date: date | None = None
    manufacturing_date: date | None = None


@dataclass(frozen=True)
class AllocationResult:
    """Per-line output of the planner.

    Invariants:
    - ``total_allocated == sum(d.allocated_quantity for d in draws)``
    - ``total_allocated + shortfall == ordered_quantity``
    """

    line_id: int
    item_id: int
    item_code: str
    method: AllocationMethod
    ordered_quantity: Decimal
    draws: tuple[AllocationDraw, ...] = ()

    @property
    def total_allocated(self) -> Decimal:
        return sum((d.allocated_quantity for d in self.draws), ZERO)

    @property
    def shortfall(self) -> Decimal:
        return max(ZERO, self.ordered_quantity - self.total_allocated)

    @property
    def is_fully_allocated(self) -> bool:
        return self.shortfall == ZERO


@dataclass(frozen=True)
class LineCoverage:
    line_id: int
    item_code: str
    ordered_quantity: Decimal
    allocated_quantity: Decimal
    method: AllocationMethod | None  # None when the line had no result at all

    @property
    def shortfall(self) -> Decimal:
        return max(ZERO, self.ordered_quantity - self.allocated_quantity)

    @property
    def is_covered(self) -> bool:
        return self.shortfall == ZERO


@dataclass(frozen=True)
class ValidationReport:
    """Advisory completeness report for a whole order.

    A shortfall is a business condition, not an error: the caller decides
    whether a partial allocation is acceptable to confirm.
    """

    lines: tuple[LineCoverage, ...] = field(default_factory=tuple)
    draws_used: int = 0

    @property
    def total_lines(self) -> int:
        return len(self.lines)

    @property
    def fully_covered(self) -> int:
        return sum(1 for c in self.lines if c.is_covered)

    @property
    def lines_with_shortfall(self) -> int:
        return self.total_lines - self.fully_covered

    @property
    def partially_allocated(self) -> int:
        return sum(
            1 for c in self.lines if not c.is_covered and c.allocated_quantity > ZERO
        )

    @property
    def unallocated(self) -> int:
        return sum(1 for c in self.lines if c.allocated_quantity == ZERO)

    @property
    def total_shortfall(self) -> Decimal:
        return sum((c.shortfall for c in self.lines), ZERO)

    @property
    def is_complete(self) -> bool:
        return self.lines_with_shortfall == 0

    def shortfall_messages(self) -> list[str]:
        return [
            f"{c.item_code}: {c.shortfall} units short"
            for c in self.lines
            if not c.is_covered
        ]

    def summary(self) -> str:
        if self.is_complete:
            return (
                f"All {self.total_lines} line(s) fully allocated "
                f"using {self.draws_used} batch draw(s)"
            )
        return (
            f"Partial allocation: {self.fully_covered} full, "
            f"{self.partially_allocated} partial, {self.unallocated} unallocated "
            f"(short {self.total_shortfall})"
        )


@dataclass(frozen=True)
class PickStop:
    """All draws that must be picked from one location."""

    location_id: int
    location_code: str | None
    draws: tuple[tuple[int, AllocationDraw], ...]  # (line_id, draw)

    @property
    def total_quantity(self) -> Decimal:
        return sum((d.allocated_quantity for _, d in self.draws), ZERO)
