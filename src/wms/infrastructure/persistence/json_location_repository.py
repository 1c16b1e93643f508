"""JSON-file-backed implementation of LocationSource."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from wms.domain.exceptions import DataUnavailable
from wms.domain.model.location import Location
from wms.domain.repository.location_source import LocationSource

logger = logging.getLogger(__name__)


class JsonLocationRepository(LocationSource):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    def resolve(self, location_id: int) -> Location | None:
        for raw in self._load_raw():
            row_id = self._row_id(raw)
            if row_id is None or row_id != location_id:
                continue
            return Location(
                id=location_id,
                code=str(raw.get("code") or f"LOC-{location_id}"),
                name=str(raw.get("name") or ""),
            )
        return None

    @staticmethod
    def _row_id(raw: object) -> int | None:
        # Rows without a usable id are skipped.
        try:
            return int(raw["id"])  # type: ignore[index]
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed location row %r", raw)
            return None

    def _load_raw(self) -> list[dict]:
        # A missing file only means no labels are known.
        if not self._file_path.exists():
            return []
        try:
            rows = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise DataUnavailable(
                f"Cannot read locations from {self._file_path}: {exc}"
            ) from exc
        if not isinstance(rows, list):
            raise DataUnavailable(
                f"Cannot read locations from {self._file_path}: expected a list"
            )
        return rows
