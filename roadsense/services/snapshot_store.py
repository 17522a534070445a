"""The externally visible weather snapshot.

Exactly one version is visible at a time. A version is an immutable mapping
published by swapping a single reference, so a reader that grabs
``current()`` once sees one complete version for as long as it holds it,
regardless of flushes happening meanwhile.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType

from roadsense.models.schemas import Cell


@dataclass(frozen=True)
class SnapshotVersion:
    version: int
    published_at: datetime
    cells: Mapping[str, Cell] = field(default_factory=lambda: MappingProxyType({}))

    def __len__(self) -> int:
        return len(self.cells)


class SnapshotStore:
    def __init__(self) -> None:
        self._current = SnapshotVersion(version=0, published_at=datetime.now(timezone.utc))
        # guards only the reference swap and version counter
        self._swap_lock = threading.Lock()

    def current(self) -> SnapshotVersion:
        return self._current

    def publish(self, cells: Mapping[str, Cell], published_at: datetime | None = None) -> SnapshotVersion:
        """Replace the visible snapshot with ``cells`` (copied, then frozen)."""
        frozen = MappingProxyType(dict(cells))
        with self._swap_lock:
            self._current = SnapshotVersion(
                version=self._current.version + 1,
                published_at=published_at or datetime.now(timezone.utc),
                cells=frozen,
            )
            return self._current

    def get(self, h3_index: str) -> Cell | None:
        return self._current.cells.get(h3_index)

    def __len__(self) -> int:
        return len(self._current)
