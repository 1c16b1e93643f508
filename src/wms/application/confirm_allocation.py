"""Application service: Confirm Allocation use case.

Invoked once the operator accepts a preview.  Delegates to the
reservation writer, which commits draw by draw.
"""

from __future__ import annotations

from wms.application.dto import CommitDTO, DrawCommitDTO
from wms.domain.model.allocation import AllocationResult
from wms.domain.model.reservation import CommitReport
from wms.domain.repository.inventory_source import InventorySource
from wms.domain.repository.reservation_sink import ReservationSink
from wms.domain.service.reservation_writer import ReservationWriter


class ConfirmAllocationHandler:

    def __init__(
        self,
        inventory_source: InventorySource,
        reservation_sink: ReservationSink,
    ) -> None:
        self._inventory_source = inventory_source
        self._reservation_sink = reservation_sink

    def handle(
        self, results: list[AllocationResult], timeout: float | None = None
    ) -> CommitReport:
        writer = ReservationWriter(self._inventory_source, self._reservation_sink)
        return writer.confirm(results, timeout=timeout)

    @staticmethod
    def to_dto(report: CommitReport) -> CommitDTO:
        return CommitDTO(
            draws=[
                DrawCommitDTO(
                    line_id=o.line_id,
                    order=o.allocation_order,
                    batch_id=o.batch_id,
                    quantity=str(o.quantity),
                    status="RESERVED" if o.committed else "FAILED",
                    error=o.error or "",
                )
                for o in report.outcomes
            ],
            committed=len(report.committed),
            failed=len(report.failed),
            total_committed=str(report.total_committed),
            released=str(report.released_quantity),
        )
