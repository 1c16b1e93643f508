"""Item reference data.

Items are owned by the master-data catalog. The allocation engine only
reads them: the ``batch_tracked`` flag drives strategy selection.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Item:

    id: int
    code: str
    name: str
    batch_tracked: bool = False
    uom: str = "EA"
