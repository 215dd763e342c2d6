"""ViewRenderer: HTML for the table and grid views of a DataTable."""

from __future__ import annotations

import pathlib
from typing import TYPE_CHECKING, Any

import jinja2
from markupsafe import Markup, escape

from ..core.columns import ColumnDefinition

if TYPE_CHECKING:
    from ..api import DataTable

_TEMPLATE_DIR = pathlib.Path(__file__).parent / "templates"

# Placeholders shown while the first response is pending; the real row
# count is unknown until then.
SKELETON_ROWS = 5
SKELETON_CARDS = 8

DEFAULT_EMPTY_MESSAGE = "No results found."

_SORT_MARKERS = {"asc": "▲", "desc": "▼"}
_ARIA_SORT = {"asc": "ascending", "desc": "descending"}


def _environment() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_cell(column: ColumnDefinition, record: Any, value: Any) -> Markup:
    """Cell content for one column; plain strings are escaped, Markup is trusted."""
    if column.cell is not None:
        content = column.cell(record, value)
    else:
        content = "" if value is None else value
    return escape(content)


class ViewRenderer:
    """Renders the processed page of a DataTable.

    Both strategies read the same page slice and selection, so switching
    view mode never changes what is shown, only how.
    """

    def __init__(self) -> None:
        self._env = _environment()

    # --- Pieces ---

    def _headers(self, table: DataTable) -> list[dict]:
        sort = table.sort
        headers = []
        for col in table.visible_columns:
            direction = sort.direction if sort is not None and sort.field == col.key else None
            headers.append({
                "key": col.key,
                "label": col.display_label,
                "width": col.width,
                "sortable": col.sortable,
                "aria_sort": _ARIA_SORT.get(direction, "none"),
                "marker": _SORT_MARKERS.get(direction),
            })
        return headers

    def _table_rows(self, table: DataTable) -> list[dict]:
        columns = table.visible_columns
        rows = []
        for rid, record in table.page_records():
            rows.append({
                "id": rid,
                "selected": table.is_selected(rid),
                "cells": [
                    render_cell(col, record, table.frame.value(rid, col.key))
                    for col in columns
                ],
            })
        return rows

    def default_card(self, table: DataTable, record_id: str, record: Any) -> Markup:
        """Card listing the visible columns as label/value pairs."""
        fields = [
            (col.display_label, render_cell(col, record, table.frame.value(record_id, col.key)))
            for col in table.visible_columns
        ]
        return Markup(self._env.get_template("card.html.j2").render(fields=fields))

    def _grid_rows(self, table: DataTable) -> list[dict]:
        renderer = table.grid_item_renderer
        rows = []
        for rid, record in table.page_records():
            selected = table.is_selected(rid)
            if renderer is not None:
                # caller-supplied renderers return trusted HTML
                card = Markup(renderer(record, selected))
            else:
                card = self.default_card(table, rid, record)
            rows.append({"id": rid, "selected": selected, "card": card})
        return rows

    def _state_context(self, table: DataTable) -> dict:
        return {
            "loading": table.loading,
            "error": table.error,
            "empty_message": escape(table.empty_message()),
            "enable_selection": table.enable_selection,
        }

    # --- Views ---

    def render_table(self, table: DataTable) -> Markup:
        headers = self._headers(table)
        span = len(headers) + (1 if table.enable_selection else 0)
        html = self._env.get_template("table.html.j2").render(
            columns=headers,
            rows=[] if table.loading else self._table_rows(table),
            column_span=max(1, span),
            skeleton_count=SKELETON_ROWS,
            all_selected=table.all_visible_selected,
            **self._state_context(table),
        )
        return Markup(html)

    def render_grid(self, table: DataTable) -> Markup:
        html = self._env.get_template("grid.html.j2").render(
            rows=[] if table.loading else self._grid_rows(table),
            skeleton_count=SKELETON_CARDS,
            **self._state_context(table),
        )
        return Markup(html)

    def render_view(self, table: DataTable) -> Markup:
        if table.view_mode == "grid":
            return self.render_grid(table)
        return self.render_table(table)

    def _facet_context(self, table: DataTable) -> list[dict]:
        facets = []
        for facet in table.facets:
            active = table.facet_values.get(facet.key, set())
            counts = table.facet_counts(facet.key)
            facets.append({
                "key": facet.key,
                "label": facet.label,
                "active_count": len(active),
                "options": [
                    {
                        "label": opt.label,
                        "value": opt.value,
                        "active": opt.value in active,
                        "count": counts.get(opt.value, 0),
                    }
                    for opt in facet.options
                ],
            })
        return facets

    def render(self, table: DataTable) -> Markup:
        """Full browser: toolbar, current view and pager."""
        result = table.result
        html = self._env.get_template("browser.html.j2").render(
            view_mode=table.view_mode,
            view_modes=list(table.view_modes),
            query=table.query,
            search_placeholder=table.search_placeholder,
            facets=self._facet_context(table) if table.enable_filtering else [],
            bulk_actions=list(table.bulk_actions.values()) if table.enable_selection else [],
            selected_count=len(table.selection),
            view_html=self.render_view(table),
            show_pager=table.enable_pagination and result.total > 0 and not table.loading,
            page_index=result.pagination.page_index,
            page_count=result.page_count,
            can_previous=result.can_previous,
            can_next=result.can_next,
        )
        return Markup(html)

    @staticmethod
    def build_css() -> str:
        """CSS for the browser markup."""
        return """
.rt-container { font-family: "Inter", system-ui, -apple-system, sans-serif; font-size: 13px; color: #0f172a; }
.rt-toolbar { display: flex; flex-wrap: wrap; justify-content: space-between; gap: 12px; margin-bottom: 12px; }
.rt-toolbar-left, .rt-toolbar-right { display: flex; align-items: center; gap: 12px; flex-wrap: wrap; }
.rt-search { min-width: 240px; padding: 6px 10px; border: 1px solid #dadce0; border-radius: 8px; }
.rt-facet { display: flex; align-items: center; gap: 6px; }
.rt-facet-label { font-weight: 500; }
.rt-count, .rt-badge { color: #64748b; font-size: 11px; }
.rt-badge { border: 1px solid #e2e8f0; border-radius: 4px; padding: 0 4px; }
.rt-view-toggle { display: flex; gap: 2px; border: 1px solid #e2e8f0; border-radius: 6px; padding: 2px; }
.rt-view-toggle button.active { background: #e8f0fe; color: #1a73e8; }
.rt-bulk.rt-destructive { color: #d93025; border-color: #d93025; }
.rt-table { width: 100%; border-collapse: collapse; border: 1px solid #e2e8f0; border-radius: 8px; }
.rt-table th { background: #f8fafc; text-align: left; padding: 8px; font-weight: 500; }
.rt-table th.rt-sortable { cursor: pointer; user-select: none; }
.rt-table td { padding: 8px; border-top: 1px solid #f1f5f9; }
.rt-table tr.rt-selected td, .rt-card.rt-selected { background: #eff6ff; }
.rt-empty, .rt-error { text-align: center; padding: 24px; color: #64748b; }
.rt-error { color: #d93025; }
.rt-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(220px, 1fr)); gap: 12px; }
.rt-card { position: relative; border: 1px solid #e2e8f0; border-radius: 12px; padding: 12px; }
.rt-card-select { position: absolute; top: 10px; right: 10px; }
.rt-card-field { display: flex; justify-content: space-between; gap: 8px; }
.rt-card-field dt { color: #64748b; }
.rt-card-field dd { margin: 0; }
.rt-skeleton-bar { display: block; height: 10px; margin: 4px 0; border-radius: 4px; background: #e2e8f0; }
.rt-pager { display: flex; justify-content: flex-end; align-items: center; gap: 6px; margin-top: 12px; }
"""
