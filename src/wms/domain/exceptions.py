"""Domain-level exceptions.

All allocation errors are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.

A shortfall is *not* an exception: it is data on AllocationResult.
"""

from __future__ import annotations

from decimal import Decimal


class DomainException(Exception):
    """Base class for all domain errors."""


class InvalidArgument(DomainException):
    """The request cannot be reasoned about (bad quantity, unknown item...)."""


class DataUnavailable(DomainException):
    """A backing source or store could not be read."""


class StoreTimeout(DataUnavailable):
    """The backing store did not answer within the caller's timeout."""


class InsufficientStock(DomainException):
    """A batch no longer holds enough available stock for a draw."""

    def __init__(self, batch_id: int, requested: Decimal, available: Decimal) -> None:
        super().__init__(
            f"Insufficient stock in batch #{batch_id} "
            f"(need {requested}, have {available} available)"
        )
        self.batch_id = batch_id
        self.requested = requested
        self.available = available
