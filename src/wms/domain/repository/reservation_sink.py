"""Abstract write access used only by the reservation writer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from wms.domain.model.reservation import Reservation


class ReservationSink(ABC):

    @abstractmethod
    def delete_reservations(
        self, line_ids: Iterable[int], timeout: float | None = None
    ) -> list[Reservation]:
        """Delete every reservation of the given lines and return them.

        The deleted quantities are released from their batches'
        allocated counters in the same atomic step.
        """

    @abstractmethod
    def insert_reservation(
        self, reservation: Reservation, timeout: float | None = None
    ) -> Reservation:
        """Atomically check availability, advance the batch and store the row.

        Raises InsufficientStock if the batch no longer holds
        ``reservation.quantity`` available units; nothing is written then.
        """

    @abstractmethod
    def list_reservations(
        self, line_ids: Iterable[int] | None = None
    ) -> list[Reservation]:
        """Return reservations, optionally restricted to some lines."""
