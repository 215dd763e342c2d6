"""FilterEngine: free-text search plus facet filters over a RecordFrame."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

import numpy as np
import pandas as pd

from ..core.records import RecordFrame

logger = logging.getLogger(__name__)


def normalize_query(query: str | None) -> str:
    """Lower-cased, stripped query; whitespace-only queries become empty."""
    if query is None:
        return ""
    return str(query).strip().lower()


def active_facets(facets: Mapping[str, Iterable] | None) -> dict[str, set[str]]:
    """Drop facets with no active values and stringify the rest."""
    if not facets:
        return {}
    result: dict[str, set[str]] = {}
    for key, values in facets.items():
        if values is None or isinstance(values, (str, bytes)):
            # a bare string is a malformed value set; ignore it
            continue
        try:
            active = {str(v) for v in values}
        except TypeError:
            continue
        if active:
            result[key] = active
    return result


class FilterEngine:
    """Narrows a record set by a text query and discrete facet filters.

    A record is kept when the query is empty or found (case-insensitive
    substring) in at least one searchable field, and when its value for
    every active facet is one of that facet's active values. Input order
    is preserved. Unknown field keys are ignored.
    """

    @staticmethod
    def query_mask(
        frame: RecordFrame,
        query: str | None,
        search_keys: Iterable[str],
    ) -> pd.Series:
        q = normalize_query(query)
        df = frame.df
        if not q:
            return pd.Series(True, index=df.index, dtype=bool)

        mask = pd.Series(False, index=df.index, dtype=bool)
        for key in search_keys:
            if not frame.has_column(key):
                logger.debug("Ignoring unknown search field '%s'", key)
                continue
            col = df[key]
            present = col.notna()
            text = col.map(lambda v: str(v).lower())
            hits = text.str.contains(q, regex=False) & present
            mask |= hits.fillna(False).astype(bool)
        return mask

    @staticmethod
    def facet_mask(
        frame: RecordFrame,
        facets: Mapping[str, Iterable] | None,
        exclude: str | None = None,
    ) -> pd.Series:
        df = frame.df
        mask = pd.Series(True, index=df.index, dtype=bool)
        for key, active in active_facets(facets).items():
            if key == exclude:
                continue
            if not frame.has_column(key):
                logger.debug("Ignoring unknown facet '%s'", key)
                continue
            col = df[key]
            mask &= col.notna() & col.map(str).isin(active)
        return mask

    @staticmethod
    def apply(
        frame: RecordFrame,
        ids: np.ndarray | list,
        query: str | None = "",
        search_keys: Iterable[str] = ("name",),
        facets: Mapping[str, Iterable] | None = None,
    ) -> np.ndarray:
        """Return the subset of ``ids`` matching the query and facets, order preserved."""
        ids = np.asarray(list(ids), dtype=object)
        if len(frame) == 0 or len(ids) == 0:
            return np.array([], dtype=object)
        mask = (
            FilterEngine.query_mask(frame, query, search_keys)
            & FilterEngine.facet_mask(frame, facets)
        )
        keep = set(mask.index[mask.to_numpy()].tolist())
        return np.array([i for i in ids.tolist() if i in keep], dtype=object)

    @staticmethod
    def facet_counts(
        frame: RecordFrame,
        key: str,
        query: str | None = "",
        search_keys: Iterable[str] = ("name",),
        facets: Mapping[str, Iterable] | None = None,
    ) -> dict[str, int]:
        """Count values of facet ``key`` among records matching everything else.

        The facet's own active values are not applied, so each count tells
        how many records selecting that value would add.
        """
        if len(frame) == 0 or not frame.has_column(key):
            return {}
        mask = (
            FilterEngine.query_mask(frame, query, search_keys)
            & FilterEngine.facet_mask(frame, facets, exclude=key)
        )
        col = frame.df.loc[mask.to_numpy(), key]
        col = col[col.notna()].map(str)
        return {str(k): int(v) for k, v in col.value_counts(sort=False).items()}
