"""TableWidget: anywidget bridge for Jupyter rendering.

Requires the [jupyter] optional extra: pip install roster-table[jupyter]
"""

from __future__ import annotations

import asyncio
import json
import logging
import pathlib

import anywidget
import traitlets

from ..api import DataTable
from ..errors import BulkActionError
from ..render.renderer import ViewRenderer

logger = logging.getLogger(__name__)

_JS_DIR = pathlib.Path(__file__).parent.parent / "js"


class TableWidget(anywidget.AnyWidget):
    """Jupyter widget showing a DataTable.

    Communicates with JS via traitlets:
    - html: rendered browser markup (Python → JS)
    - event_json: user interactions (JS → Python), one JSON object per
      event with a ``type`` of search, facet, sort, page, select,
      select_all, view, bulk or row
    """

    _esm = traitlets.Unicode("").tag(sync=True)
    _css = traitlets.Unicode("").tag(sync=True)

    html = traitlets.Unicode("").tag(sync=True)
    event_json = traitlets.Unicode("{}").tag(sync=True)
    status_text = traitlets.Unicode("").tag(sync=True)

    def __init__(self, table: DataTable, **kwargs) -> None:
        super().__init__(
            _esm=(_JS_DIR / "table_widget.js").read_text(encoding="utf-8"),
            _css=ViewRenderer.build_css(),
            html=str(table.render()),
            **kwargs,
        )
        self.table = table
        self._row_callback = None
        self.observe(self._on_event, names=["event_json"])

    def refresh(self) -> None:
        """Re-render after the table changed from Python."""
        self.html = str(self.table.render())

    def set_row_callback(self, callback) -> None:
        """Register a callback: fn(result_of_on_row_click)."""
        self._row_callback = callback

    def _on_event(self, change: dict) -> None:
        """Apply one JS event to the table and re-render."""
        try:
            event = json.loads(change["new"])
        except (json.JSONDecodeError, TypeError):
            logger.debug("Ignoring malformed widget event: %r", change["new"])
            return
        if not isinstance(event, dict):
            return
        try:
            self.handle_event(event)
        except (KeyError, ValueError) as e:
            logger.debug("Rejected widget event %s: %s", event, e)
            self.status_text = f"Error: {e}"
        self.refresh()

    def handle_event(self, event: dict) -> None:
        table = self.table
        kind = event.get("type")
        if kind == "search":
            table.set_query(event.get("query", ""))
        elif kind == "facet":
            table.toggle_facet_value(event["key"], event["value"])
        elif kind == "sort":
            table.toggle_sort(event["key"])
        elif kind == "page":
            direction = event.get("direction")
            if direction == "next":
                table.next_page()
            elif direction == "previous":
                table.previous_page()
            else:
                table.go_to_page(int(event.get("index", 0)))
        elif kind == "select":
            table.select_one(event["id"], bool(event.get("selected", True)))
        elif kind == "select_all":
            table.select_all_visible(bool(event.get("selected", True)))
        elif kind == "view":
            table.set_view_mode(event["mode"])
        elif kind == "bulk":
            self._schedule_bulk(event["action"])
        elif kind == "row":
            result = table.row_click(event["id"])
            if self._row_callback is not None:
                self._row_callback(result)
        else:
            logger.debug("Ignoring unknown widget event type %r", kind)

    def _schedule_bulk(self, action_id: str) -> None:
        if action_id not in self.table.bulk_actions:
            raise KeyError(f"Bulk action '{action_id}' not found.")
        # the kernel already runs an event loop
        task = asyncio.ensure_future(self.table.run_bulk_action(action_id))
        task.add_done_callback(self._on_bulk_done)

    def _on_bulk_done(self, task: asyncio.Task) -> None:
        try:
            result = task.result()
        except BulkActionError as e:
            logger.exception("Bulk action '%s' failed", e.action_id)
            self.status_text = f"Error: {e}"
        else:
            self.status_text = (
                f"{len(result.succeeded)} done"
                + (f", {len(result.failed)} failed" if result.failed else "")
            )
        self.refresh()
