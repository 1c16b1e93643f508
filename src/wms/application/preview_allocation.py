"""Application service: Preview Allocation use case.

Orchestrates the read-only part of the pipeline for one order:
item lookup -> batch catalog -> strategy selection -> planning ->
validation.  Nothing is written; the preview can be repeated freely.

Lines of the same order share one snapshot.  After each line is planned
the snapshot handed to the next line has that line's draws taken out, so
two lines for the same item never book the same units twice.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from wms.application.dto import (
    AllocationPlanDTO,
    DrawDTO,
    LinePlanDTO,
    OrderLineSpec,
    PickStopDTO,
)
from wms.domain.exceptions import InvalidArgument
from wms.domain.model.allocation import (
    AllocationMethod,
    AllocationResult,
    PickStop,
    ValidationReport,
)
from wms.domain.model.inventory import InventoryBatch, expiry_status
from wms.domain.model.order import OrderLine
from wms.domain.model.value_objects import Quantity
from wms.domain.repository.item_source import ItemSource
from wms.domain.service.allocation_planner import plan, remaining_after
from wms.domain.service.allocation_validator import validate
from wms.domain.service.batch_catalog import BatchCatalog
from wms.domain.service.picking_list import picking_list
from wms.domain.service.strategy_selector import select_method


@dataclass(frozen=True)
class AllocationPreview:
    lines: list[OrderLine]
    results: list[AllocationResult]
    report: ValidationReport
    picking: list[PickStop]
    as_of: date


class PreviewAllocationHandler:

    def __init__(self, item_source: ItemSource, catalog: BatchCatalog) -> None:
        self._item_source = item_source
        self._catalog = catalog

    def handle(
        self,
        specs: list[OrderLineSpec],
        method: AllocationMethod | None = None,
        as_of: date | None = None,
        timeout: float | None = None,
    ) -> AllocationPreview:
        """Resolve item codes to order lines, then plan them."""
        lines: list[OrderLine] = []
        for spec in specs:
            item = self._item_source.get_by_code(spec.item_code)
            if item is None:
                raise InvalidArgument(f"Unknown item: '{spec.item_code}'")
            lines.append(
                OrderLine(
                    line_id=spec.line_id,
                    item_id=item.id,
                    item_code=item.code,
                    ordered_quantity=Quantity.of(spec.quantity),
                    required_batch_number=spec.batch_number or None,
                )
            )
        return self.preview(lines, method=method, as_of=as_of, timeout=timeout)

    def preview(
        self,
        lines: list[OrderLine],
        method: AllocationMethod | None = None,
        as_of: date | None = None,
        timeout: float | None = None,
    ) -> AllocationPreview:
        """Plan every line.

        When ``method`` is given it is used for every line; otherwise each
        line gets its own method from the strategy selector.
        """
        if not lines:
            raise InvalidArgument("Order must contain at least one line")
        line_ids = [line.line_id for line in lines]
        if len(set(line_ids)) != len(line_ids):
            raise InvalidArgument("Line ids must be unique within an order")

        as_of = as_of or date.today()
        items = self._item_source.fetch_item_config({line.item_id for line in lines})
        for line in lines:
            if line.item_id not in items:
                raise InvalidArgument(
                    f"Unknown item #{line.item_id} ({line.item_code}) on line #{line.line_id}"
                )

        snapshot: list[InventoryBatch] = self._catalog.batches_for_lines(
            lines, timeout=timeout
        )
        results: list[AllocationResult] = []
        for line in lines:
            line_method = method or select_method(
                line, snapshot, items[line.item_id], as_of=as_of
            )
            result = plan(line, line_method, snapshot, as_of=as_of)
            results.append(result)
            snapshot = remaining_after(snapshot, [result])

        return AllocationPreview(
            lines=list(lines),
            results=results,
            report=validate(results, lines),
            picking=picking_list(results),
            as_of=as_of,
        )

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def to_dto(preview: AllocationPreview) -> AllocationPlanDTO:
        def _expiry(d: date | None) -> str:
            if d is None:
                return "-"
            return f"{d.isoformat()} ({expiry_status(d, preview.as_of).value})"

        return AllocationPlanDTO(
            lines=[
                LinePlanDTO(
                    line_id=r.line_id,
                    item_code=r.item_code,
                    method=r.method.value,
                    ordered=str(r.ordered_quantity),
                    allocated=str(r.total_allocated),
                    shortfall=str(r.shortfall),
                    draws=[
                        DrawDTO(
                            order=d.allocation_order,
                            batch_id=d.batch_id,
                            batch_number=d.batch_number or "-",
                            location_code=d.location_code or f"LOC-{d.location_id}",
                            pallet_id=d.pallet_id or "-",
                            expiry=_expiry(d.expiry_date),
                            quantity=str(d.allocated_quantity),
                        )
                        for d in r.draws
                    ],
                )
                for r in preview.results
            ],
            summary=preview.report.summary(),
            shortfall_messages=preview.report.shortfall_messages(),
            is_complete=preview.report.is_complete,
            picking=[
                PickStopDTO(
                    location_code=s.location_code or f"LOC-{s.location_id}",
                    quantity=str(s.total_quantity),
                    draws=len(s.draws),
                )
                for s in preview.picking
            ],
        )
