"""JSON-file-backed implementation of ItemSource."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from wms.domain.exceptions import DataUnavailable
from wms.domain.model.item import Item
from wms.domain.repository.item_source import ItemSource


class JsonItemRepository(ItemSource):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- ItemSource interface -------------------------------------------------

    def fetch_item_config(self, item_ids: Iterable[int]) -> dict[int, Item]:
        wanted = set(item_ids)
        return {item.id: item for item in self._load() if item.id in wanted}

    def list_all(self) -> list[Item]:
        return self._load()

    def get_by_code(self, code: str) -> Item | None:
        for item in self._load():
            if item.code.lower() == code.lower():
                return item
        return None

    def save(self, item: Item) -> None:
        """Insert or replace one item (seeding API, not used by allocation)."""
        items = {i.id: i for i in self._load()}
        items[item.id] = item
        raw = [
            {
                "id": i.id,
                "code": i.code,
                "name": i.name,
                "batch_tracked": i.batch_tracked,
                "uom": i.uom,
            }
            for i in items.values()
        ]
        self._file_path.write_text(json.dumps(raw, indent=2) + "\n", encoding="utf-8")

    # --- Serialization helpers ------------------------------------------------

    def _load(self) -> list[Item]:
        try:
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
            return [
                Item(
                    id=int(r["id"]),
                    code=r["code"],
                    name=r.get("name", r["code"]),
                    batch_tracked=bool(r.get("batch_tracked", False)),
                    uom=r.get("uom") or "EA",
                )
                for r in raw
            ]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            raise DataUnavailable(f"Cannot read items from {self._file_path}: {exc}") from exc

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
