"""JSON-file-backed inventory store.

Implements both InventorySource (batch reads) and ReservationSink
(reservation writes).  Batches live in ``inventory.json`` and reservation
rows in ``reservations.json`` next to it.

Every read-modify-write runs under one lock per store directory, shared by
all repository instances of the process.  That lock is the check-and-
increment point that keeps two concurrent confirmations from claiming
the same units.  It does not protect against other processes.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path

from wms.domain.exceptions import DataUnavailable, InvalidArgument, StoreTimeout
from wms.domain.model.allocation import AllocationMethod
from wms.domain.model.inventory import InventoryBatch, InventoryStatus
from wms.domain.model.reservation import Reservation
from wms.domain.model.value_objects import ZERO, to_decimal
from wms.domain.repository.inventory_source import InventorySource
from wms.domain.repository.reservation_sink import ReservationSink

logger = logging.getLogger(__name__)

_registry_lock = threading.Lock()
_store_locks: dict[Path, threading.Lock] = {}


def _lock_for(directory: Path) -> threading.Lock:
    with _registry_lock:
        return _store_locks.setdefault(directory.resolve(), threading.Lock())


class JsonInventoryRepository(InventorySource, ReservationSink):

    def __init__(self, data_dir: Path, default_timeout: float | None = None) -> None:
        self._inventory_path = data_dir / "inventory.json"
        self._reservations_path = data_dir / "reservations.json"
        self._default_timeout = default_timeout
        self._ensure_file(self._inventory_path)
        self._ensure_file(self._reservations_path)
        self._lock = _lock_for(data_dir)

    # --- InventorySource interface --------------------------------------------

    def fetch_batches(
        self, item_ids: Iterable[int], timeout: float | None = None
    ) -> list[InventoryBatch]:
        wanted = set(item_ids)
        with self._locked(timeout):
            rows = self._load_raw(self._inventory_path)
        return [self._to_domain(raw) for raw in rows if raw.get("item_id") in wanted]

    def get_batch(
        self, batch_id: int, timeout: float | None = None
    ) -> InventoryBatch | None:
        with self._locked(timeout):
            rows = self._load_raw(self._inventory_path)
        for raw in rows:
            if raw.get("id") == batch_id:
                return self._to_domain(raw)
        return None

    # --- ReservationSink interface --------------------------------------------

    def delete_reservations(
        self, line_ids: Iterable[int], timeout: float | None = None
    ) -> list[Reservation]:
        targets = set(line_ids)
        with self._locked(timeout):
            reservations = self._load_raw(self._reservations_path)
            deleted = [r for r in reservations if r["line_id"] in targets]
            if not deleted:
                return []
            kept = [r for r in reservations if r["line_id"] not in targets]

            batches = {raw["id"]: raw for raw in self._load_raw(self._inventory_path)}
            released: list[Reservation] = []
            for raw in deleted:
                reservation = self._reservation_to_domain(raw)
                released.append(reservation)
                batch_raw = batches.get(reservation.batch_id)
                if batch_raw is None:
                    logger.warning(
                        "Reservation for line #%d points at missing batch #%d",
                        reservation.line_id, reservation.batch_id,
                    )
                    continue
                batch = self._to_domain(batch_raw)
                quantity = min(reservation.quantity, batch.allocated_quantity)
                if quantity < reservation.quantity:
                    logger.warning(
                        "Batch #%d: releasing %s but only %s allocated",
                        batch.id, reservation.quantity, batch.allocated_quantity,
                    )
                if quantity > ZERO:
                    batch.release(quantity)
                batches[batch.id] = self._to_raw(batch)

            self._persist_raw(self._inventory_path, list(batches.values()))
            self._persist_raw(self._reservations_path, kept)
        return released

    def insert_reservation(
        self, reservation: Reservation, timeout: float | None = None
    ) -> Reservation:
        with self._locked(timeout):
            rows = self._load_raw(self._inventory_path)
            for i, raw in enumerate(rows):
                if raw.get("id") == reservation.batch_id:
                    batch = self._to_domain(raw)
                    break
            else:
                raise DataUnavailable(f"Batch #{reservation.batch_id} not found")

            batch.reserve(reservation.quantity)  # raises InsufficientStock
            rows[i] = self._to_raw(batch)

            reservations = self._load_raw(self._reservations_path)
            reservations.append(self._reservation_to_raw(reservation))
            self._persist_raw(self._inventory_path, rows)
            self._persist_raw(self._reservations_path, reservations)
        return reservation

    def list_reservations(
        self, line_ids: Iterable[int] | None = None
    ) -> list[Reservation]:
        targets = set(line_ids) if line_ids is not None else None
        with self._locked(None):
            rows = self._load_raw(self._reservations_path)
        return [
            self._reservation_to_domain(r)
            for r in rows
            if targets is None or r["line_id"] in targets
        ]

    # --- Extra write used for seeding/receipts -------------------------------

    def save(self, batch: InventoryBatch) -> None:
        """Insert or replace one batch row.

        Seeding API for receipts and fixtures; allocation never calls it.
        """
        with self._locked(None):
            rows = self._load_raw(self._inventory_path)
            for i, raw in enumerate(rows):
                if raw.get("id") == batch.id:
                    rows[i] = self._to_raw(batch)
                    break
            else:
                rows.append(self._to_raw(batch))
            self._persist_raw(self._inventory_path, rows)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(batch: InventoryBatch) -> dict:
        return {
            "id": batch.id,
            "item_id": batch.item_id,
            "item_code": batch.item_code,
            "batch_number": batch.batch_number,
            "location_id": batch.location_id,
            "location_code": batch.location_code,
            "pallet_id": batch.pallet_id,
            "manufacturing_date": _iso(batch.manufacturing_date),
            "expiry_date": _iso(batch.expiry_date),
            "on_hand_quantity": str(batch.on_hand_quantity),
            "allocated_quantity": str(batch.allocated_quantity),
            "shipped_quantity": str(batch.shipped_quantity),
            "status": batch.status.value,
            "received_at": _iso(batch.received_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> InventoryBatch:
        try:
            return InventoryBatch(
                id=int(raw["id"]),
                item_id=int(raw["item_id"]),
                item_code=str(raw["item_code"]),
                location_id=int(raw["location_id"]),
                on_hand_quantity=to_decimal(raw["on_hand_quantity"], "on_hand_quantity"),
                batch_number=raw.get("batch_number") or None,
                location_code=raw.get("location_code") or None,
                pallet_id=raw.get("pallet_id") or None,
                manufacturing_date=_parse_date(raw.get("manufacturing_date")),
                expiry_date=_parse_date(raw.get("expiry_date")),
                allocated_quantity=to_decimal(
                    raw.get("allocated_quantity"), "allocated_quantity"
                ),
                shipped_quantity=to_decimal(raw.get("shipped_quantity"), "shipped_quantity"),
                status=InventoryStatus(str(raw.get("status") or "received").lower()),
                received_at=_parse_datetime(raw.get("received_at")),
            )
        except (KeyError, ValueError, TypeError, InvalidArgument) as exc:
            raise DataUnavailable(f"Malformed inventory row {raw!r}: {exc}") from exc

    @staticmethod
    def _reservation_to_raw(reservation: Reservation) -> dict:
        return {
            "batch_id": reservation.batch_id,
            "line_id": reservation.line_id,
            "item_id": reservation.item_id,
            "location_id": reservation.location_id,
            "quantity": str(reservation.quantity),
            "method": reservation.method.value,
            "reserved_at": reservation.reserved_at.isoformat(),
            "batch_number": reservation.batch_number,
            "pallet_id": reservation.pallet_id,
        }

    @staticmethod
    def _reservation_to_domain(raw: dict) -> Reservation:
        try:
            return Reservation(
                batch_id=int(raw["batch_id"]),
                line_id=int(raw["line_id"]),
                item_id=int(raw["item_id"]),
                location_id=int(raw["location_id"]),
                quantity=to_decimal(raw["quantity"], "quantity"),
                method=AllocationMethod(raw["method"]),
                reserved_at=datetime.fromisoformat(raw["reserved_at"]),
                batch_number=raw.get("batch_number"),
                pallet_id=raw.get("pallet_id"),
            )
        except (KeyError, ValueError, TypeError, InvalidArgument) as exc:
            raise DataUnavailable(f"Malformed reservation row {raw!r}: {exc}") from exc

    # --- File helpers ---------------------------------------------------------

    @contextmanager
    def _locked(self, timeout: float | None) -> Iterator[None]:
        if timeout is None:
            timeout = self._default_timeout
        acquired = self._lock.acquire(timeout=-1 if timeout is None else timeout)
        if not acquired:
            raise StoreTimeout(f"Inventory store busy for more than {timeout}s")
        try:
            yield
        finally:
            self._lock.release()

    @staticmethod
    def _load_raw(path: Path) -> list[dict]:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise DataUnavailable(f"Cannot read {path}: {exc}") from exc

    @staticmethod
    def _persist_raw(path: Path, records: list[dict]) -> None:
        try:
            path.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise DataUnavailable(f"Cannot write {path}: {exc}") from exc

    @staticmethod
    def _ensure_file(path: Path) -> None:
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("[]", encoding="utf-8")


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_date(raw: str | None) -> date | None:
    if not raw:
        return None
    # Accept full timestamps too ("2025-01-01T00:00:00").
    return date.fromisoformat(str(raw)[:10])


def _parse_datetime(raw: str | None) -> datetime | None:
    if not raw:
        return None
    return datetime.fromisoformat(str(raw))
