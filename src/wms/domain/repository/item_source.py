"""Abstract read access to item master data."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from wms.domain.model.item import Item


class ItemSource(ABC):

    @abstractmethod
    def fetch_item_config(self, item_ids: Iterable[int]) -> dict[int, Item]:
        """Return the known items keyed by id; unknown ids are simply absent."""

    @abstractmethod
    def list_all(self) -> list[Item]:
        """Return every item in the catalog."""

    @abstractmethod
    def get_by_code(self, code: str) -> Item | None:
        """Return an item by its code (case-insensitive), or None."""
