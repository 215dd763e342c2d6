"""RecordFrame: validated record collection indexed by stable record id."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any, Iterable

import pandas as pd

from .columns import ColumnDefinition
from .validation import coerce_record_id, validate_record_ids


def record_fields(record: Any) -> dict[str, Any]:
    """Return a shallow field dict for a mapping, dataclass or plain object."""
    if isinstance(record, Mapping):
        return dict(record)
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return {f.name: getattr(record, f.name) for f in dataclasses.fields(record)}
    if hasattr(record, "__dict__"):
        return dict(vars(record))
    return {}


class RecordFrame:
    """Immutable snapshot of a record collection.

    Wraps a pandas DataFrame (one row per record, index = record id) used
    for filtering and sorting, and keeps the original record objects so
    selections can be materialized back into full records.
    """

    __slots__ = ("_df", "_records")

    def __init__(
        self,
        records: Iterable[Any],
        columns: Iterable[ColumnDefinition] = (),
    ) -> None:
        records = list(records)
        accessors = [c for c in columns if c.accessor is not None]
        ids: list[str] = []
        rows: list[dict[str, Any]] = []
        for rec in records:
            ids.append(coerce_record_id(rec))
            row = record_fields(rec)
            for col in accessors:
                row[col.key] = col.accessor(rec)
            rows.append(row)
        validate_record_ids(ids)

        self._records: dict[str, Any] = dict(zip(ids, records))
        self._df = _object_frame(rows, pd.Index(ids, dtype=object))
        self._df.flags.allows_duplicate_labels = False

    @property
    def df(self) -> pd.DataFrame:
        return self._df

    @property
    def ids(self) -> list[str]:
        return list(self._records)

    @property
    def columns(self) -> list[str]:
        return list(self._df.columns)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def has_column(self, key: str) -> bool:
        return key in self._df.columns

    def get_column(self, key: str) -> pd.Series:
        if key not in self._df.columns:
            raise KeyError(
                f"Field '{key}' not found in records. Available: {self.columns}"
            )
        return self._df[key]

    def record(self, record_id: str) -> Any:
        return self._records[record_id]

    def records_for(self, ids: Iterable[str]) -> list[Any]:
        """Return full records for ``ids`` in the given order, skipping unknown ids."""
        return [self._records[i] for i in ids if i in self._records]

    def value(self, record_id: str, key: str) -> Any:
        """Return a single field value, or None when the field is missing or NA."""
        if key not in self._df.columns:
            return None
        val = self._df.at[record_id, key]
        if _is_missing(val):
            return None
        return val


def _is_missing(val: Any) -> bool:
    # list-like values (e.g. a list of subjects) are never missing
    if not pd.api.types.is_scalar(val):
        return False
    return bool(pd.isna(val))


def _object_frame(rows: list[dict[str, Any]], index: pd.Index) -> pd.DataFrame:
    """Build a frame of object columns holding the record values unchanged.

    Missing fields are stored as None.
    """
    keys: dict[str, None] = {}
    for row in rows:
        keys.update(dict.fromkeys(row))
    data = {
        key: pd.Series([row.get(key) for row in rows], index=index, dtype=object)
        for key in keys
    }
    return pd.DataFrame(data, index=index)
