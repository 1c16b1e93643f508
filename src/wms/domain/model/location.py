"""Warehouse locations and the staging-location policy."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Location:

    id: int
    code: str
    name: str = ""

    @staticmethod
    def synthetic(location_id: int) -> Location:
        """Placeholder used when the location lookup fails."""
        return Location(id=location_id, code=f"LOC-{location_id}")


DEFAULT_STAGING_MARKERS = ("STAG", "PREP")


@dataclass(frozen=True)
class StagingPolicy:
    """Decides whether a location is a staging/preparation area.

    Stock sitting in staging is already on its way out and must never be
    offered for a new allocation.  A location is staging when its id is in
    ``location_ids`` or when its code or name contains one of ``markers``
    (case-insensitive).
    """

    location_ids: frozenset[int] = field(default_factory=frozenset)
    markers: tuple[str, ...] = DEFAULT_STAGING_MARKERS

    def is_staging(self, location: Location) -> bool:
        if location.id in self.location_ids:
            return True
        code = location.code.upper()
        name = location.name.upper()
        return any(m.upper() in code or m.upper() in name for m in self.markers)
