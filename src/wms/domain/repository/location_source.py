"""Abstract best-effort location lookup."""

from __future__ import annotations

from abc import ABC, abstractmethod

from wms.domain.model.location import Location


class LocationSource(ABC):

    @abstractmethod
    def resolve(self, location_id: int) -> Location | None:
        """Return the location, or None if it is unknown.

        Callers treat any failure as "label unknown", never as fatal.
        """
