"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OrderLineSpec:
    """Input: one requested line (item code + quantity, optional batch pin)."""

    line_id: int
    item_code: str
    quantity: str
    batch_number: str | None = None


@dataclass(frozen=True)
class DrawDTO:
    """Output: one planned batch draw as displayed to the user."""

    order: int
    batch_id: int
    batch_number: str
    location_code: str
    pallet_id: str
    expiry: str  # "2025-01-01 (EXPIRED)" or "-"
    quantity: str


@dataclass(frozen=True)
class LinePlanDTO:
    line_id: int
    item_code: str
    method: str
    ordered: str
    allocated: str
    shortfall: str
    draws: list[DrawDTO]


@dataclass(frozen=True)
class PickStopDTO:
    location_code: str
    quantity: str
    draws: int


@dataclass(frozen=True)
class AllocationPlanDTO:
    lines: list[LinePlanDTO]
    summary: str
    shortfall_messages: list[str]
    is_complete: bool
    picking: list[PickStopDTO]


@dataclass(frozen=True)
class DrawCommitDTO:
    line_id: int
    order: int
    batch_id: int
    quantity: str
    status: str  # "RESERVED" or "FAILED"
    error: str


@dataclass(frozen=True)
class CommitDTO:
    draws: list[DrawCommitDTO]
    committed: int
    failed: int
    total_committed: str
    released: str
