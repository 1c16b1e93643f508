"""Domain service: Allocation Validator.

Cross-checks a finished plan against the order lines it was built for.
Lines without a result count as fully short instead of being dropped.
"""

from __future__ import annotations

from collections.abc import Iterable

from wms.domain.exceptions import InvalidArgument
from wms.domain.model.allocation import AllocationResult, LineCoverage, ValidationReport
from wms.domain.model.order import OrderLine
from wms.domain.model.value_objects import ZERO


def validate(
    results: Iterable[AllocationResult], lines: Iterable[OrderLine]
) -> ValidationReport:
    lines = list(lines)
    by_line: dict[int, AllocationResult] = {}
    known = {line.line_id for line in lines}

    for result in results:
        if result.line_id not in known:
            raise InvalidArgument(f"Result for unknown line #{result.line_id}")
        if result.line_id in by_line:
            raise InvalidArgument(f"Duplicate result for line #{result.line_id}")
        by_line[result.line_id] = result

    coverage: list[LineCoverage] = []
    for line in lines:
        result = by_line.get(line.line_id)
        coverage.append(
            LineCoverage(
                line_id=line.line_id,
                item_code=line.item_code,
                ordered_quantity=line.ordered_quantity.value,
                allocated_quantity=result.total_allocated if result else ZERO,
                method=result.method if result else None,
            )
        )

    return ValidationReport(
        lines=tuple(coverage),
        draws_used=sum(len(r.draws) for r in by_line.values()),
    )
