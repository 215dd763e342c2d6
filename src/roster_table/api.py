"""DataTable: the main user-facing browser over a record collection."""

from __future__ import annotations

import logging
import pathlib
from dataclasses import replace
from typing import Any, Callable, Iterable

from markupsafe import Markup

from .core.columns import ColumnDefinition, FacetFilter, BulkAction
from .core.records import RecordFrame
from .core.validation import (
    validate_columns,
    validate_facets,
    validate_bulk_actions,
    validate_page_size,
)
from .transform.search import FilterEngine, active_facets, normalize_query
from .transform.reorder import SortState
from .transform.paginator import Paginator, PaginationState
from .transform.pipeline import BrowsePipeline, BrowseResult
from .actions.bulk import BulkActionRunner, BulkResult, call_handler
from .render.renderer import ViewRenderer, DEFAULT_EMPTY_MESSAGE
from .widget.selection import SelectionState

logger = logging.getLogger(__name__)

EmptyState = str | Callable[[bool], str] | None


class DataTable:
    """Sortable, filterable, paginated browser with selection and bulk actions.

    Usage::

        import roster_table as rt

        table = rt.DataTable(
            students,
            columns=[rt.ColumnDefinition("name"), rt.ColumnDefinition("grade")],
            facets=[rt.FacetFilter.from_values("status", ["active", "archived"])],
            bulk_actions=[rt.BulkAction("archive", "Archive", archive_students)],
        )
        table.set_query("ali")
        table.toggle_sort("name")
        table.select_all_visible()
        result = await table.run_bulk_action("archive")
        html = table.render()

    Data flows one way: records → filtered → sorted → paginated → rendered.
    Selection is keyed by record id and survives filter, sort and page
    changes.
    """

    VIEW_MODES = ("table", "grid")

    def __init__(
        self,
        records: Iterable[Any] = (),
        columns: Iterable[ColumnDefinition] = (),
        *,
        search_key: str = "name",
        search_keys: Iterable[str] | None = None,
        search_placeholder: str = "Search...",
        facets: Iterable[FacetFilter] = (),
        bulk_actions: Iterable[BulkAction] = (),
        page_size: int = 10,
        view_modes: Iterable[str] = VIEW_MODES,
        enable_selection: bool = True,
        enable_filtering: bool = True,
        enable_column_visibility: bool = True,
        enable_pagination: bool = True,
        empty_state: EmptyState = None,
        grid_item_renderer: Callable[[Any, bool], str] | None = None,
        on_row_click: Callable[[Any], Any] | None = None,
        on_data_change: Callable[[list], Any] | None = None,
        loading: bool = False,
    ) -> None:
        self._columns = validate_columns(columns)
        self._column_map = {c.key: c for c in self._columns}
        self._facets = validate_facets(facets)
        self._bulk_actions = validate_bulk_actions(bulk_actions)
        self._page_size = validate_page_size(page_size)

        self._view_modes = tuple(view_modes)
        bad = [m for m in self._view_modes if m not in self.VIEW_MODES]
        if not self._view_modes or bad:
            raise ValueError(
                f"view_modes must be a non-empty subset of {self.VIEW_MODES}, "
                f"got {list(self._view_modes)}."
            )

        self.search_key = search_key
        self.search_keys = tuple(search_keys) if search_keys is not None else (search_key,)
        self.search_placeholder = search_placeholder
        self.enable_selection = enable_selection
        self.enable_filtering = enable_filtering
        self.enable_column_visibility = enable_column_visibility
        self.enable_pagination = enable_pagination
        self.empty_state = empty_state
        self.grid_item_renderer = grid_item_renderer
        self.on_row_click = on_row_click
        self.on_data_change = on_data_change

        self._selection = SelectionState()
        self._renderer = ViewRenderer()

        # Refresh generation: only the latest begin_refresh() may apply data
        self._generation = 0
        self._loading = loading
        self._error: str | None = None

        self._records: list[Any] = []
        self._frame = RecordFrame([], self._columns)
        self._reset_state()
        self._set_records(records)

    # --- State defaults ---

    def _reset_state(self) -> None:
        self._query = ""
        self._facet_values: dict[str, set[str]] = {}
        self._sort: SortState | None = None
        self._pagination = PaginationState(0, self._page_size)
        self._view_mode = self._view_modes[0]
        self._column_visibility = {c.key: c.visible for c in self._columns}
        self._selection.clear()
        self._result: BrowseResult | None = None

    def _invalidate(self) -> None:
        self._result = None

    def _set_records(self, records: Iterable[Any]) -> None:
        records = list(records)
        self._frame = RecordFrame(records, self._columns)
        self._records = records
        stale = self._selection.prune(self._frame.ids)
        if stale:
            logger.debug("Pruned %d stale selected ids: %s", len(stale), stale[:5])
        self._invalidate()

    # --- Records ---

    @property
    def records(self) -> list[Any]:
        return list(self._records)

    @property
    def frame(self) -> RecordFrame:
        return self._frame

    def load(self, records: Iterable[Any]) -> DataTable:
        """Replace the collection with a new one and reset all browsing state."""
        self._set_records(records)
        self._reset_state()
        return self

    def set_data(self, records: Iterable[Any]) -> DataTable:
        """Reconcile with refreshed records.

        Keeps query, facets, sort and view mode; prunes selected ids that
        no longer exist; resets the page when it falls out of range.
        """
        self._set_records(records)
        return self

    # --- Refresh (stale-response guard) ---

    @property
    def loading(self) -> bool:
        return self._loading

    @loading.setter
    def loading(self, value: bool) -> None:
        self._loading = bool(value)

    @property
    def error(self) -> str | None:
        return self._error

    def begin_refresh(self) -> int:
        """Start a fetch; returns the token that finish_refresh() must present."""
        self._generation += 1
        self._loading = True
        self._error = None
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def finish_refresh(self, token: int, records: Iterable[Any]) -> bool:
        """Apply fetched records unless a newer refresh has started since."""
        if not self.is_current(token):
            logger.debug("Discarding stale refresh %d (current %d)", token, self._generation)
            return False
        self.set_data(records)
        self._loading = False
        return True

    def fail_refresh(self, token: int, error: BaseException | str) -> bool:
        """Record a fetch failure for the error slot, unless it is stale."""
        if not self.is_current(token):
            logger.debug("Discarding stale refresh failure %d: %s", token, error)
            return False
        self._error = str(error)
        self._loading = False
        return True

    async def refresh(self, loader: Callable[[], Any]) -> bool:
        """Fetch records with ``loader`` (sync or async) and apply them.

        Returns False when the response was discarded as stale. Loader
        errors are recorded in ``error`` and re-raised.
        """
        token = self.begin_refresh()
        try:
            records = await call_handler(loader)
        except Exception as exc:
            if self.fail_refresh(token, exc):
                raise
            return False
        return self.finish_refresh(token, records)

    # --- Search & facets ---

    @property
    def query(self) -> str:
        return self._query

    def set_query(self, query: str | None) -> DataTable:
        query = "" if query is None else str(query)
        if query != self._query:
            self._query = query
            self._pagination = replace(self._pagination, page_index=0)
            self._invalidate()
        return self

    @property
    def facets(self) -> list[FacetFilter]:
        return list(self._facets)

    @property
    def facet_values(self) -> dict[str, set[str]]:
        return {k: set(v) for k, v in self._facet_values.items()}

    def _facet_known(self, key: str) -> bool:
        if any(f.key == key for f in self._facets):
            return True
        logger.debug("Ignoring unknown facet '%s'", key)
        return False

    def set_facet(self, key: str, values: Iterable[Any] | None) -> DataTable:
        """Set the active values of one facet; unknown keys are ignored."""
        if not self._facet_known(key):
            return self
        new = active_facets({key: values}).get(key, set())
        if new != self._facet_values.get(key, set()):
            if new:
                self._facet_values[key] = new
            else:
                self._facet_values.pop(key, None)
            self._pagination = replace(self._pagination, page_index=0)
            self._invalidate()
        return self

    def toggle_facet_value(self, key: str, value: Any) -> DataTable:
        current = self._facet_values.get(key, set())
        value = str(value)
        new = current - {value} if value in current else current | {value}
        return self.set_facet(key, new)

    def clear_filters(self) -> DataTable:
        """Clear the query and every facet."""
        self.set_query("")
        for key in list(self._facet_values):
            self.set_facet(key, None)
        return self

    @property
    def has_active_filters(self) -> bool:
        return bool(normalize_query(self._query)) or bool(self._facet_values)

    def facet_counts(self, key: str) -> dict[str, int]:
        return FilterEngine.facet_counts(
            self._frame, key,
            query=self._query,
            search_keys=self.search_keys,
            facets=self._facet_values,
        )

    # --- Sort ---

    @property
    def sort(self) -> SortState | None:
        return self._sort

    def _column(self, key: str) -> ColumnDefinition:
        if key not in self._column_map:
            raise KeyError(
                f"Column '{key}' not found. Available: {list(self._column_map)}"
            )
        return self._column_map[key]

    def toggle_sort(self, key: str) -> DataTable:
        """Header click: flip the active column, or sort a new column ascending."""
        col = self._column(key)
        if not col.sortable:
            return self
        if self._sort is None:
            self._sort = SortState(key, "asc")
        else:
            self._sort = self._sort.toggled(key)
        self._invalidate()
        return self

    def set_sort(self, key: str | None, direction: str = "asc") -> DataTable:
        """Set the sort explicitly; ``key=None`` restores source order."""
        if key is None:
            self._sort = None
        else:
            self._column(key)
            self._sort = SortState(key, direction)
        self._invalidate()
        return self

    # --- Pagination ---

    @property
    def result(self) -> BrowseResult:
        """Filtered, sorted and paginated view (recomputed after any change)."""
        if self._result is None:
            self._result = BrowsePipeline.run(
                self._frame,
                query=self._query,
                search_keys=self.search_keys,
                facets=self._facet_values,
                sort=self._sort,
                pagination=self._pagination,
                paginate=self.enable_pagination,
            )
            if self.enable_pagination:
                self._pagination = self._result.pagination
        return self._result

    @property
    def pagination(self) -> PaginationState:
        return self.result.pagination

    @property
    def page_count(self) -> int:
        return self.result.page_count

    def _set_pagination(self, state: PaginationState) -> DataTable:
        if state != self._pagination:
            self._pagination = state
            self._invalidate()
        return self

    def _navigate(self, move: Callable[[PaginationState, int], PaginationState]) -> DataTable:
        if not self.enable_pagination:
            return self
        total = self.result.total  # also clamps self._pagination
        return self._set_pagination(move(self._pagination, total))

    def next_page(self) -> DataTable:
        return self._navigate(Paginator.next_page)

    def previous_page(self) -> DataTable:
        return self._navigate(lambda state, total: Paginator.previous_page(state))

    def go_to_page(self, page_index: int) -> DataTable:
        return self._navigate(lambda state, total: Paginator.go_to(state, page_index, total))

    def set_page_size(self, page_size: int) -> DataTable:
        self._page_size = validate_page_size(page_size)
        return self._set_pagination(PaginationState(0, self._page_size))

    def page_records(self) -> list[tuple[str, Any]]:
        """(id, record) pairs on the current page."""
        return [(rid, self._frame.record(rid)) for rid in self.result.page_ids]

    @property
    def visible_ids(self) -> list[str]:
        """Ids of every record in the filtered result, all pages."""
        return self.result.mapper.ids

    # --- Selection ---

    @property
    def selection(self) -> SelectionState:
        return self._selection

    @property
    def selected_ids(self) -> list[str]:
        return self._selection.ids

    def is_selected(self, record_id: str) -> bool:
        return self._selection.is_selected(record_id)

    def selected_records(self) -> list[Any]:
        """Full records for the current selection, in source order."""
        return [r for rid, r in zip(self._frame.ids, self._records) if rid in self._selection]

    def select_one(self, record_id: str, selected: bool = True) -> bool:
        """Add or remove one id. Returns False for ids not in the collection."""
        record_id = str(record_id)
        if selected and record_id not in self._frame:
            logger.debug("Ignoring selection of unknown id '%s'", record_id)
            return False
        self._selection.select([record_id], selected)
        return True

    def toggle_selection(self, record_id: str) -> bool:
        """Flip one id; returns its new selected state."""
        record_id = str(record_id)
        if self.is_selected(record_id):
            self.select_one(record_id, False)
            return False
        return self.select_one(record_id, True)

    def select_all_visible(self, selected: bool = True) -> DataTable:
        """Select (or deselect) every record in the filtered set, not just the page."""
        self._selection.select(self.visible_ids, selected)
        return self

    def clear_selection(self) -> DataTable:
        self._selection.clear()
        return self

    @property
    def all_visible_selected(self) -> bool:
        ids = self.visible_ids
        return bool(ids) and all(rid in self._selection for rid in ids)

    def on_select(self, callback: Callable[[list], Any]) -> None:
        """Register a callback: fn(selected_ids)."""
        self._selection.on_select(callback)

    # --- Bulk actions ---

    @property
    def bulk_actions(self) -> dict[str, BulkAction]:
        return dict(self._bulk_actions)

    async def run_bulk_action(self, action_id: str) -> BulkResult:
        """Run a bulk action over the selected records.

        Succeeded ids leave the selection; failed ids stay selected for a
        retry. If the handler raises as a whole, BulkActionError propagates
        and the selection is unchanged. The collection itself is not
        touched: the caller refreshes it afterwards.
        """
        if action_id not in self._bulk_actions:
            raise KeyError(
                f"Bulk action '{action_id}' not found. Available: {list(self._bulk_actions)}"
            )
        action = self._bulk_actions[action_id]
        result = await BulkActionRunner.run(action, self.selected_records())
        self._selection.select(result.succeeded, False)
        return result

    def remove_selected(self) -> list[Any]:
        """Drop selected records from the collection and report the remainder."""
        remaining = [r for rid, r in zip(self._frame.ids, self._records) if rid not in self._selection]
        self._selection.clear()
        self.set_data(remaining)
        if self.on_data_change is not None:
            self.on_data_change(list(remaining))
        return remaining

    # --- Row click ---

    def row_click(self, record_id: str) -> Any:
        """Invoke on_row_click with the full record; returns its result."""
        record = self._frame.record(str(record_id))
        if self.on_row_click is None:
            return None
        return self.on_row_click(record)

    # --- View ---

    @property
    def view_modes(self) -> tuple[str, ...]:
        return self._view_modes

    @property
    def view_mode(self) -> str:
        return self._view_mode

    def set_view_mode(self, mode: str) -> DataTable:
        """Switch between table and grid; filter, sort, page and selection are kept."""
        if mode not in self._view_modes:
            raise ValueError(
                f"Invalid view mode '{mode}'. Must be one of {list(self._view_modes)}."
            )
        self._view_mode = mode
        return self

    @property
    def columns(self) -> list[ColumnDefinition]:
        return list(self._columns)

    @property
    def column_visibility(self) -> dict[str, bool]:
        return dict(self._column_visibility)

    @property
    def visible_columns(self) -> list[ColumnDefinition]:
        return [c for c in self._columns if self._column_visibility.get(c.key, True)]

    def set_column_visibility(self, key: str, visible: bool) -> DataTable:
        col = self._column(key)
        if not visible and not (col.hideable and self.enable_column_visibility):
            raise ValueError(f"Column '{key}' cannot be hidden.")
        self._column_visibility[key] = bool(visible)
        return self

    def empty_message(self) -> str:
        """Empty-state content; a callable receives whether any filter is active."""
        if self.empty_state is None:
            return DEFAULT_EMPTY_MESSAGE
        if callable(self.empty_state):
            return self.empty_state(self.has_active_filters)
        return self.empty_state

    # --- Output ---

    def render(self) -> Markup:
        """Full browser HTML: toolbar, current view and pager."""
        return self._renderer.render(self)

    def render_view(self) -> Markup:
        """Only the table or grid for the current page."""
        return self._renderer.render_view(self)

    def export_html(self, path: str | pathlib.Path, title: str = "roster-table") -> None:
        """Write the current view as a standalone HTML file."""
        from .export.html_export import HTMLExporter

        HTMLExporter.export(path, self, title=title)

    def _repr_html_(self) -> str:
        return str(self.render())

    def __repr__(self) -> str:
        return (
            f"DataTable(records={len(self._records)}, visible={self.result.total}, "
            f"selected={len(self._selection)}, view={self._view_mode!r})"
        )
