"""IDMapper: the ordered id sequence behind every rendered page.

Holds the record ids of the processed (filtered, sorted) collection in
display order. Immutable; the pipeline builds a fresh one per run.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


@dataclass(frozen=True)
class IDMapper:
    """Record ids in display order, before pagination."""

    order: np.ndarray
    _positions: dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_ids(cls, ids: np.ndarray | list) -> IDMapper:
        arr = np.asarray(list(ids), dtype=object)
        positions = {rid: i for i, rid in enumerate(arr.tolist())}
        if len(positions) != len(arr):
            raise ValueError("Record ids must be unique.")
        return cls(order=arr, _positions=positions)

    @property
    def size(self) -> int:
        return len(self.order)

    @property
    def ids(self) -> list:
        return self.order.tolist()

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._positions

    def position_of(self, record_id: object) -> int | None:
        """Zero-based display position of ``record_id``, or None when filtered out."""
        return self._positions.get(record_id)

    def window(self, start: int, stop: int) -> list:
        """Ids in the half-open display range ``[start, stop)``, clipped to bounds."""
        start, stop = max(0, start), min(self.size, stop)
        if start >= stop:
            return []
        return self.order[start:stop].tolist()

    def page(self, page_index: int, page_size: int) -> list:
        """Ids on page ``page_index`` (zero-based)."""
        start = page_index * page_size
        return self.window(start, start + page_size)
