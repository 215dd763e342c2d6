"""BrowsePipeline: orchestrates filter → sort → paginate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from ..core.id_mapper import IDMapper
from ..core.records import RecordFrame
from .search import FilterEngine
from .reorder import SortEngine, SortState
from .paginator import Paginator, PaginationState


@dataclass(frozen=True)
class BrowseResult:
    """Output of the full pipeline for one render."""

    mapper: IDMapper
    pagination: PaginationState
    page_ids: list

    @property
    def total(self) -> int:
        """Number of records after filtering (all pages)."""
        return self.mapper.size

    @property
    def page_count(self) -> int:
        return Paginator.page_count(self.total, self.pagination.page_size)

    @property
    def can_previous(self) -> bool:
        return Paginator.can_previous(self.pagination)

    @property
    def can_next(self) -> bool:
        return Paginator.can_next(self.pagination, self.total)


class BrowsePipeline:
    """Derives the visible page from scratch on every call.

    Applies transforms in order:
    1. Filter (query + facets), preserving source order
    2. Sort (single key, stable)
    3. Paginate (page_index clamped to the new page count)

    Nothing is cached between calls, so a data refresh that lands after
    the user changed filters is reconciled by simply running again.
    """

    @staticmethod
    def run(
        frame: RecordFrame,
        *,
        query: str | None = "",
        search_keys: Iterable[str] = ("name",),
        facets: Mapping[str, Iterable] | None = None,
        sort: SortState | None = None,
        pagination: PaginationState | None = None,
        paginate: bool = True,
    ) -> BrowseResult:
        ids = FilterEngine.apply(
            frame, frame.ids, query=query, search_keys=search_keys, facets=facets,
        )
        ids = SortEngine.compute_order(ids, frame, sort)
        mapper = IDMapper.from_ids(ids)

        if pagination is None:
            pagination = PaginationState()
        if not paginate:
            # a single page holding every record
            pagination = PaginationState(0, max(1, mapper.size))
        pagination = Paginator.clamp(pagination, mapper.size)

        return BrowseResult(
            mapper=mapper,
            pagination=pagination,
            page_ids=Paginator.slice(mapper, pagination),
        )
