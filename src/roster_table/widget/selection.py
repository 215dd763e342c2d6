"""SelectionState: selected record ids + callback registry."""

from __future__ import annotations

from typing import Callable, Any, Iterable


SelectionCallback = Callable[[list], Any]


class SelectionState:
    """Holds the selected record ids and notifies registered callbacks.

    Ids are kept in insertion order. Callbacks fire only when the set
    actually changes.
    """

    def __init__(self) -> None:
        self._ids: dict[str, None] = {}
        self._callbacks: list[SelectionCallback] = []

    @property
    def ids(self) -> list[str]:
        return list(self._ids)

    @property
    def value(self) -> dict[str, list]:
        """Current selection as {ids: [...]}."""
        return {"ids": self.ids}

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._ids

    def is_selected(self, record_id: str) -> bool:
        return record_id in self._ids

    def update(self, ids: Iterable[str]) -> None:
        """Replace the selection and notify all callbacks."""
        new = dict.fromkeys(ids)
        if list(new) == list(self._ids):
            return
        self._ids = new
        self._notify()

    def select(self, ids: Iterable[str], selected: bool = True) -> None:
        """Add (or remove, when ``selected`` is False) ``ids``."""
        new = dict(self._ids)
        for rid in ids:
            if selected:
                new.setdefault(rid, None)
            else:
                new.pop(rid, None)
        self.update(new)

    def toggle(self, record_id: str) -> bool:
        """Flip one id; returns its new selected state."""
        selected = record_id not in self._ids
        self.select([record_id], selected)
        return selected

    def prune(self, valid_ids: Iterable[str]) -> list[str]:
        """Drop ids not in ``valid_ids``; returns the dropped ids."""
        valid = set(valid_ids)
        stale = [rid for rid in self._ids if rid not in valid]
        if stale:
            self.update(rid for rid in self._ids if rid in valid)
        return stale

    def clear(self) -> None:
        """Clear the selection."""
        self.update([])

    def on_select(self, callback: SelectionCallback) -> None:
        """Register a callback: fn(ids)."""
        self._callbacks.append(callback)

    def _notify(self) -> None:
        ids = self.ids
        for cb in self._callbacks:
            cb(ids)

    def __repr__(self) -> str:
        return f"SelectionState(ids={len(self._ids)})"
