"""FacetChart: Plotly bar chart of facet value counts."""

from __future__ import annotations

from collections import Counter

import plotly.graph_objects as go

from .state import BrowserState

COLOR_MATCHING = "rgba(180, 180, 180, 0.5)"
COLOR_SELECTED = "rgba(31, 119, 180, 0.7)"
COLOR_MATCHING_LINE = "rgba(140, 140, 140, 0.8)"
COLOR_SELECTED_LINE = "rgba(31, 119, 180, 1.0)"

_LAYOUT_DEFAULTS = dict(
    template="plotly_white",
    margin=dict(l=50, r=20, t=30, b=40),
    height=250,
    font=dict(family="Inter, -apple-system, BlinkMacSystemFont, Segoe UI, sans-serif", size=11),
    showlegend=True,
    legend=dict(
        orientation="h", yanchor="bottom", y=1.02,
        xanchor="right", x=1, font=dict(size=10),
    ),
    barmode="group",
    yaxis_title="Count",
)


class FacetChart:
    """Counts per option of one facet: "Matching" vs "Selected".

    "Matching" counts follow the current query and the other facets (the
    same numbers the toolbar shows next to each option); "Selected"
    counts the selected records regardless of filters.
    """

    def __init__(self, key: str | None = None) -> None:
        self.key = key

    def _facet(self, state: BrowserState):
        facets = state.table.facets
        if not facets:
            return None
        if self.key is None:
            return facets[0]
        for facet in facets:
            if facet.key == self.key:
                return facet
        raise KeyError(f"Facet '{self.key}' not found. Available: {[f.key for f in facets]}")

    def figure(self, state: BrowserState) -> go.Figure | None:
        """Build the figure, or None when the table has no facets."""
        facet = self._facet(state)
        if facet is None:
            return None
        table = state.table
        labels = [opt.label for opt in facet.options]
        counts = table.facet_counts(facet.key)

        fig = go.Figure()
        fig.add_trace(go.Bar(
            x=labels,
            y=[counts.get(opt.value, 0) for opt in facet.options],
            name="Matching",
            marker_color=COLOR_MATCHING,
            marker_line_color=COLOR_MATCHING_LINE,
            marker_line_width=1,
        ))

        selected = table.selected_ids
        if selected:
            values = (table.frame.value(rid, facet.key) for rid in selected)
            sel_counts = Counter(str(v) for v in values if v is not None)
            fig.add_trace(go.Bar(
                x=labels,
                y=[sel_counts.get(opt.value, 0) for opt in facet.options],
                name="Selected",
                marker_color=COLOR_SELECTED,
                marker_line_color=COLOR_SELECTED_LINE,
                marker_line_width=1,
            ))

        fig.update_layout(**_LAYOUT_DEFAULTS, title=facet.label, xaxis_title=facet.label)
        return fig
