"""Groups planned draws by location for the picking walk."""

from __future__ import annotations

from collections.abc import Iterable

from wms.domain.model.allocation import AllocationDraw, AllocationResult, PickStop


def picking_list(results: Iterable[AllocationResult]) -> list[PickStop]:
    """One stop per location, ascending location id; draws ordered by line."""
    grouped: dict[int, list[tuple[int, AllocationDraw]]] = {}
    for result in results:
        for draw in result.draws:
            grouped.setdefault(draw.location_id, []).append((result.line_id, draw))

    stops: list[PickStop] = []
    for location_id in sorted(grouped):
        entries = sorted(
            grouped[location_id], key=lambda e: (e[0], e[1].allocation_order)
        )
        stops.append(
            PickStop(
                location_id=location_id,
                location_code=entries[0][1].location_code,
                draws=tuple(entries),
            )
        )
    return stops
