"""Paginator: fixed-size page slicing with bounded navigation."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from ..core.id_mapper import IDMapper
from ..core.validation import validate_page_size


@dataclass(frozen=True)
class PaginationState:
    """Zero-based page index and page size."""

    page_index: int = 0
    page_size: int = 10

    def __post_init__(self) -> None:
        validate_page_size(self.page_size)
        if self.page_index < 0:
            raise ValueError(f"page_index must be >= 0, got {self.page_index}.")


class Paginator:
    """Slices an ordered id sequence into pages.

    Navigation never wraps: moving past either end returns the state
    unchanged, which is what the disabled pager buttons reflect.
    """

    @staticmethod
    def page_count(total: int, page_size: int) -> int:
        """Number of pages; an empty result still has one (empty) page."""
        return max(1, math.ceil(total / page_size))

    @staticmethod
    def clamp(state: PaginationState, total: int) -> PaginationState:
        """Reset page_index to 0 when it no longer fits ``total`` records."""
        if state.page_index > Paginator.page_count(total, state.page_size) - 1:
            return replace(state, page_index=0)
        return state

    @staticmethod
    def slice(mapper: IDMapper, state: PaginationState) -> list:
        return mapper.page(state.page_index, state.page_size)

    @staticmethod
    def can_previous(state: PaginationState) -> bool:
        return state.page_index > 0

    @staticmethod
    def can_next(state: PaginationState, total: int) -> bool:
        return state.page_index < Paginator.page_count(total, state.page_size) - 1

    @staticmethod
    def next_page(state: PaginationState, total: int) -> PaginationState:
        if not Paginator.can_next(state, total):
            return state
        return replace(state, page_index=state.page_index + 1)

    @staticmethod
    def previous_page(state: PaginationState) -> PaginationState:
        if not Paginator.can_previous(state):
            return state
        return replace(state, page_index=state.page_index - 1)

    @staticmethod
    def go_to(state: PaginationState, page_index: int, total: int) -> PaginationState:
        """Jump to ``page_index``; out-of-range targets are a no-op."""
        if page_index < 0 or page_index > Paginator.page_count(total, state.page_size) - 1:
            return state
        return replace(state, page_index=page_index)
