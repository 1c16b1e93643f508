"""Abstract read access to the external inventory store.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, SQL, in-memory)
live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from wms.domain.model.inventory import InventoryBatch


class InventorySource(ABC):

    @abstractmethod
    def fetch_batches(
        self, item_ids: Iterable[int], timeout: float | None = None
    ) -> list[InventoryBatch]:
        """Return every batch of the given items, whatever its status.

        Raises DataUnavailable if the store cannot be read.
        """

    @abstractmethod
    def get_batch(
        self, batch_id: int, timeout: float | None = None
    ) -> InventoryBatch | None:
        """Return the current state of one batch, or None."""
