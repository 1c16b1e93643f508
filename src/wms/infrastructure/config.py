"""Runtime configuration, read from the environment.

A ``.env`` file in the working directory is loaded first (python-dotenv),
real environment variables take precedence over it.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from wms.domain.exceptions import InvalidArgument
from wms.domain.model.location import DEFAULT_STAGING_MARKERS, StagingPolicy

# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"
DEFAULT_STORE_TIMEOUT = 5.0


def _split(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass(frozen=True)
class Settings:

    data_dir: Path = DEFAULT_DATA_DIR
    staging_location_ids: frozenset[int] = field(default_factory=frozenset)
    staging_markers: tuple[str, ...] = DEFAULT_STAGING_MARKERS
    store_timeout: float = DEFAULT_STORE_TIMEOUT
    log_level: str = "WARNING"

    @property
    def staging_policy(self) -> StagingPolicy:
        return StagingPolicy(
            location_ids=self.staging_location_ids, markers=self.staging_markers
        )

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``environ`` (defaults to ``os.environ`` + .env)."""
        if environ is None:
            load_dotenv()
            environ = os.environ

        try:
            location_ids = frozenset(
                int(v) for v in _split(environ.get("WMS_STAGING_LOCATION_IDS"))
            )
        except ValueError as exc:
            raise InvalidArgument(
                f"WMS_STAGING_LOCATION_IDS must be comma-separated integers: {exc}"
            ) from exc

        markers = tuple(_split(environ.get("WMS_STAGING_MARKERS"))) or DEFAULT_STAGING_MARKERS

        raw_timeout = environ.get("WMS_STORE_TIMEOUT")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_STORE_TIMEOUT
        except ValueError as exc:
            raise InvalidArgument(f"Invalid WMS_STORE_TIMEOUT: {raw_timeout!r}") from exc
        if timeout <= 0:
            raise InvalidArgument("WMS_STORE_TIMEOUT must be positive")

        log_level = environ.get("WMS_LOG_LEVEL", "WARNING").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise InvalidArgument(f"Unknown WMS_LOG_LEVEL: {log_level!r}")

        data_dir = environ.get("WMS_DATA_DIR")
        return Settings(
            data_dir=Path(data_dir) if data_dir else DEFAULT_DATA_DIR,
            staging_location_ids=location_ids,
            staging_markers=markers,
            store_timeout=timeout,
            log_level=log_level,
        )
