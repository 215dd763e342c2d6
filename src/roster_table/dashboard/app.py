"""BrowserApp: assembles the Panel template and serves the browser."""

from __future__ import annotations

import panel as pn

from ..api import DataTable
from .chart_panel import FacetChart
from .state import BrowserState

_DASHBOARD_CSS = """
:root, :host {
  --design-primary-color: #0f766e;
  --design-primary-text-color: #ffffff;
  --design-secondary-color: #115e59;
  --panel-primary-color: #0f766e;
  --mdc-theme-primary: #0f766e;
}
.bk-btn-primary {
  border-radius: 6px !important;
  background-color: #0f766e !important;
  border-color: #0f766e !important;
  text-transform: none !important;
}
.bk-btn-danger {
  border-radius: 6px !important;
  background-color: #fef2f2 !important;
  border: 1px solid #dc2626 !important;
  color: #b91c1c !important;
  text-transform: none !important;
}
.bk-input, select {
  border-radius: 6px !important;
  border: 1px solid #cbd5e1 !important;
  font-size: 13px !important;
}
.rt-status { color: #64748b; font-size: 12px; }
"""

_BUTTON_TYPES = {"default": "default", "destructive": "danger", "primary": "primary"}


class BrowserApp:
    """Interactive record browser application.

    Assembles a Panel MaterialTemplate with:
    - Sidebar: search, facet filters, sort, column visibility, view mode
    - Main area: rendered table/grid, pager, bulk action bar
    - Facet chart: Plotly counts for the first facet, refreshed on change
    """

    def __init__(self, table: DataTable, title: str = "roster-table") -> None:
        pn.extension("plotly", sizing_mode="stretch_width")
        pn.config.raw_css.append(_DASHBOARD_CSS)

        self.title = title
        self.state = BrowserState(table=table)
        self.chart = FacetChart()
        self._build_widgets()

    # --- Widgets ---

    def _build_widgets(self) -> None:
        state = self.state
        table = state.table

        self.search_input = pn.widgets.TextInput.from_param(
            state.param.query, name="Search", placeholder=table.search_placeholder,
        )
        self.facet_widgets = []
        for facet in table.facets:
            widget = pn.widgets.MultiChoice(
                name=facet.label,
                options={opt.label: opt.value for opt in facet.options},
                value=sorted(state.facet_values.get(facet.key, [])),
            )
            widget.param.watch(
                lambda event, key=facet.key: self._on_facet_widget(key, event.new), "value",
            )
            self.facet_widgets.append(widget)
        self.clear_button = pn.widgets.Button(name="Clear filters", button_type="default")
        self.clear_button.on_click(lambda event: state.clear_filters())

        sortable = [c.key for c in table.columns if c.sortable]
        self.sort_select = pn.widgets.Select(
            name="Sort by", options=[""] + sortable, value=state.sort_field or "",
        )
        self.sort_select.param.watch(
            lambda event: setattr(state, "sort_field", event.new or None), "value",
        )
        self.direction_toggle = pn.widgets.RadioButtonGroup.from_param(
            state.param.sort_direction, name="Direction",
        )

        hideable = [c.key for c in table.columns if c.hideable]
        self.hidden_select = pn.widgets.MultiChoice.from_param(
            state.param.hidden_columns, name="Hidden columns", options=hideable,
        )
        self.view_toggle = pn.widgets.RadioButtonGroup.from_param(
            state.param.view_mode, name="View", options=list(table.view_modes),
        )

        self.prev_button = pn.widgets.Button(name="Previous", width=90)
        self.next_button = pn.widgets.Button(name="Next", width=90)
        self.prev_button.on_click(lambda event: state.previous_page())
        self.next_button.on_click(lambda event: state.next_page())
        self.select_all_button = pn.widgets.Button(name="Select all", width=100)
        self.select_all_button.on_click(lambda event: state.select_all_visible(True))
        self.clear_selection_button = pn.widgets.Button(name="Clear selection", width=120)
        self.clear_selection_button.on_click(lambda event: state.clear_selection())

        self.bulk_buttons = []
        for action in table.bulk_actions.values():
            button = pn.widgets.Button(
                name=action.label,
                button_type=_BUTTON_TYPES.get(action.variant, "default"),
                width=110,
            )
            button.on_click(self._bulk_callback(action.id))
            self.bulk_buttons.append(button)

        self.html_pane = pn.pane.HTML(state.html, sizing_mode="stretch_width")
        self.status_pane = pn.pane.Str(state.status_text, css_classes=["rt-status"])
        self.chart_pane = pn.pane.Plotly(
            self.chart.figure(state), height=280, visible=bool(table.facets),
        )

        state.param.watch(self._on_state_change, ["html", "status_text"])
        state.param.watch(self._on_facet_values, ["facet_values"])
        state.param.watch(self._on_sort_field, ["sort_field"])

    def _bulk_callback(self, action_id: str):
        async def callback(event) -> None:
            await self.state.run_bulk_action(action_id)
        return callback

    def _on_facet_widget(self, key: str, values: list) -> None:
        facets = dict(self.state.facet_values)
        facets[key] = list(values)
        self.state.facet_values = facets

    # --- State → widgets ---

    def _on_state_change(self, *events) -> None:
        self.html_pane.object = self.state.html
        self.status_pane.object = self.state.status_text
        result = self.state.table.result
        self.prev_button.disabled = not result.can_previous
        self.next_button.disabled = not result.can_next
        if self.state.table.facets:
            self.chart_pane.object = self.chart.figure(self.state)

    def _on_facet_values(self, event) -> None:
        for facet, widget in zip(self.state.table.facets, self.facet_widgets):
            value = sorted(event.new.get(facet.key, []))
            if widget.value != value:
                widget.value = value

    def _on_sort_field(self, event) -> None:
        self.sort_select.value = event.new or ""

    # --- Layout ---

    def _build_template(self) -> pn.template.MaterialTemplate:
        """Build the Panel MaterialTemplate layout."""
        sidebar = pn.Column(
            self.search_input,
            *self.facet_widgets,
            self.clear_button,
            pn.layout.Divider(),
            self.sort_select,
            self.direction_toggle,
            self.hidden_select,
            self.view_toggle,
        )
        template = pn.template.MaterialTemplate(
            title=self.title,
            sidebar=[sidebar],
            sidebar_width=280,
            header_background="#f8fafc",
            header_color="#0f172a",
        )
        toolbar = pn.Row(
            self.select_all_button,
            self.clear_selection_button,
            *self.bulk_buttons,
            self.status_pane,
        )
        pager = pn.Row(self.prev_button, self.next_button)
        template.main.append(pn.Column(
            toolbar,
            self.html_pane,
            pager,
            self.chart_pane,
            sizing_mode="stretch_width",
        ))
        self._on_state_change()
        return template

    def serve(self, port: int = 0, show: bool = True, **kwargs) -> None:
        """Start the Panel server and optionally open the browser.

        Parameters
        ----------
        port : int
            Port number. 0 = auto-assign.
        show : bool
            Whether to open the browser automatically.
        **kwargs
            Additional keyword arguments passed to pn.serve().
        """
        template = self._build_template()
        pn.serve(
            template,
            port=port or 0,
            show=show,
            title=f"{self.title} Explorer",
            **kwargs,
        )
