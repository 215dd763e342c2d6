"""SortEngine: single-key stable ordering of record ids."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from ..core.records import RecordFrame

VALID_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class SortState:
    """The single active sort key."""

    field: str
    direction: str = "asc"

    def __post_init__(self) -> None:
        if self.direction not in VALID_DIRECTIONS:
            raise ValueError(
                f"Invalid sort direction '{self.direction}'. "
                f"Must be one of {VALID_DIRECTIONS}."
            )

    @property
    def ascending(self) -> bool:
        return self.direction == "asc"

    def toggled(self, field: str) -> SortState:
        """Apply the header-click rule.

        Clicking the active column flips its direction; clicking another
        column makes it active in ascending order.
        """
        if field == self.field:
            return SortState(field, "desc" if self.ascending else "asc")
        return SortState(field, "asc")

    def to_dict(self) -> dict:
        return {"field": self.field, "direction": self.direction}


def _sort_key(value: Any) -> Any:
    if isinstance(value, str):
        return value.lower()
    return value


class SortEngine:
    """Order ids by one field value.

    Strings compare case-insensitively, numbers and dates natively.
    Missing values go last in both directions. The sort is stable: ties
    keep their incoming relative order, ascending or descending.
    """

    @staticmethod
    def compute_order(
        ids: np.ndarray | list,
        frame: RecordFrame,
        sort: SortState | None,
    ) -> np.ndarray:
        """Return ``ids`` sorted by ``sort``; unchanged when sort is None or the field is unknown."""
        ids = np.asarray(list(ids), dtype=object)
        if sort is None or len(ids) < 2 or not frame.has_column(sort.field):
            return ids

        values = frame.df.loc[list(ids), sort.field]
        keys = values.map(_sort_key)
        present = keys.notna().to_numpy()
        present_ids = ids[present].tolist()
        missing_ids = ids[~present].tolist()

        # Python's sort is stable for reverse=True as well
        pairs = list(zip(keys[present].tolist(), present_ids))
        try:
            pairs = sorted(pairs, key=lambda p: p[0], reverse=not sort.ascending)
        except TypeError:
            # mixed types: fall back to comparing string forms
            pairs = sorted(pairs, key=lambda p: str(p[0]), reverse=not sort.ascending)
        ordered = [rid for _, rid in pairs] + missing_ids
        return np.array(ordered, dtype=object)
