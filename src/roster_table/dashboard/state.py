"""BrowserState: reactive state for the dashboard, backed by a DataTable."""

from __future__ import annotations

import logging

import param

from ..api import DataTable
from ..errors import BulkActionError

logger = logging.getLogger(__name__)


class BrowserState(param.Parameterized):
    """Reactive wrapper around a DataTable.

    Each control parameter is pushed into the table when it changes; the
    table's resulting state (clamped page, pruned selection) is pulled
    back and ``html`` is re-rendered. The table stays the single source
    of truth.
    """

    # --- Table (set once at init) ---
    table = param.ClassSelector(class_=DataTable, doc="Browser being driven")

    # --- Filtering ---
    query = param.String(default="")
    facet_values = param.Dict(default={})

    # --- Sort ---
    sort_field = param.String(default=None, allow_None=True)
    sort_direction = param.Selector(default="asc", objects=["asc", "desc"])

    # --- Pagination ---
    page_index = param.Integer(default=0, bounds=(0, None))

    # --- View ---
    view_mode = param.Selector(default="table", objects=list(DataTable.VIEW_MODES))
    hidden_columns = param.List(default=[])

    # --- Selection (read back from the table) ---
    selected_ids = param.List(default=[])

    # --- Output ---
    status_text = param.String(default="")
    html = param.String(default="")

    # True while table state is being copied into params
    _syncing = False
    # True while a change is being pushed into the table
    _busy = False

    def __init__(self, **params):
        super().__init__(**params)
        if self.table is None:
            raise ValueError("BrowserState requires a DataTable.")
        self._syncing = True
        try:
            self.param.update(
                view_mode=self.table.view_mode,
                hidden_columns=[k for k, v in self.table.column_visibility.items() if not v],
            )
        finally:
            self._syncing = False
        self.table.on_select(self._on_table_select)
        self._pull()

    # --- Table → params ---

    def _pull(self) -> None:
        table = self.table
        sort = table.sort
        self._syncing = True
        try:
            self.param.update(
                query=table.query,
                facet_values={k: sorted(v) for k, v in table.facet_values.items()},
                sort_field=sort.field if sort is not None else None,
                sort_direction=sort.direction if sort is not None else self.sort_direction,
                page_index=table.pagination.page_index,
                selected_ids=table.selected_ids,
            )
        finally:
            self._syncing = False
        self.html = str(table.render())

    def _on_table_select(self, ids: list) -> None:
        if not (self._syncing or self._busy):
            self._pull()

    def _apply(self, action, *args) -> None:
        if self._syncing:
            return
        self._busy = True
        try:
            action(*args)
        except (KeyError, ValueError) as e:
            logger.debug("Rejected dashboard change: %s", e)
            self.status_text = f"Error: {e}"
        else:
            self.status_text = ""
        finally:
            self._busy = False
        self._pull()

    # --- Params → table ---

    @param.depends("query", watch=True)
    def _on_query(self):
        self._apply(self.table.set_query, self.query)

    @param.depends("facet_values", watch=True)
    def _on_facets(self):
        def push(values):
            for facet in self.table.facets:
                self.table.set_facet(facet.key, values.get(facet.key))

        self._apply(push, self.facet_values)

    @param.depends("sort_field", "sort_direction", watch=True)
    def _on_sort(self):
        self._apply(self.table.set_sort, self.sort_field or None, self.sort_direction)

    @param.depends("page_index", watch=True)
    def _on_page(self):
        self._apply(self.table.go_to_page, self.page_index)

    @param.depends("view_mode", watch=True)
    def _on_view_mode(self):
        self._apply(self.table.set_view_mode, self.view_mode)

    @param.depends("hidden_columns", watch=True)
    def _on_hidden_columns(self):
        def push(hidden):
            for col in self.table.columns:
                visible = col.key not in hidden
                if self.table.column_visibility.get(col.key) != visible:
                    self.table.set_column_visibility(col.key, visible)

        self._apply(push, set(self.hidden_columns))

    # --- Commands (buttons) ---

    def toggle_sort(self, key: str) -> None:
        self._apply(self.table.toggle_sort, key)

    def next_page(self) -> None:
        self._apply(self.table.next_page)

    def previous_page(self) -> None:
        self._apply(self.table.previous_page)

    def toggle_selection(self, record_id: str) -> None:
        self._apply(self.table.toggle_selection, record_id)

    def select_all_visible(self, selected: bool = True) -> None:
        self._apply(self.table.select_all_visible, selected)

    def clear_selection(self) -> None:
        """Deselect everything, including records hidden by the current filters."""
        self._apply(self.table.clear_selection)

    def clear_filters(self) -> None:
        self._apply(self.table.clear_filters)

    async def run_bulk_action(self, action_id: str) -> None:
        """Run a bulk action and report the outcome in ``status_text``."""
        action = self.table.bulk_actions.get(action_id)
        if action is None:
            self.status_text = f"Error: unknown action '{action_id}'"
            return
        self.status_text = f"{action.label}..."
        self._busy = True
        try:
            result = await self.table.run_bulk_action(action_id)
        except BulkActionError as e:
            logger.exception("Bulk action '%s' failed", action_id)
            self.status_text = f"Error: {e}"
        else:
            if result.ok:
                self.status_text = f"{action.label}: {len(result.succeeded)} done"
            else:
                self.status_text = (
                    f"{action.label}: {len(result.succeeded)} done, "
                    f"{len(result.failed)} failed"
                )
        finally:
            self._busy = False
        self._pull()

    def refresh_view(self) -> None:
        """Re-render after the table was changed directly (e.g. new data)."""
        self._pull()
