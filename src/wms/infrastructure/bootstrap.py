"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from wms.domain.service.batch_catalog import BatchCatalog
from wms.infrastructure.config import Settings
from wms.infrastructure.persistence.json_inventory_repository import (
    JsonInventoryRepository,
)
from wms.infrastructure.persistence.json_item_repository import JsonItemRepository
from wms.infrastructure.persistence.json_location_repository import (
    JsonLocationRepository,
)


@lru_cache(maxsize=1)
def settings() -> Settings:
    return Settings.from_env()


def item_repository() -> JsonItemRepository:
    return JsonItemRepository(settings().data_dir / "items.json")


def location_repository() -> JsonLocationRepository:
    return JsonLocationRepository(settings().data_dir / "locations.json")


def inventory_repository() -> JsonInventoryRepository:
    cfg = settings()
    return JsonInventoryRepository(cfg.data_dir, default_timeout=cfg.store_timeout)


def batch_catalog() -> BatchCatalog:
    inventory = inventory_repository()
    return BatchCatalog(
        inventory_source=inventory,
        location_source=location_repository(),
        staging_policy=settings().staging_policy,
        reservation_sink=inventory,
    )
