"""Tests for the reactive dashboard state and facet chart."""

import asyncio

import pytest

from roster_table import BulkAction, DataTable
from roster_table.dashboard.state import BrowserState


@pytest.fixture
def state(student_table):
    return BrowserState(table=student_table)


class TestBrowserState:
    def test_requires_table(self):
        with pytest.raises(ValueError, match="DataTable"):
            BrowserState()

    def test_initial_render(self, state):
        assert state.html.startswith('<div class="rt-container"')
        assert state.page_index == 0
        assert state.view_mode == "table"

    def test_query_pushes_to_table(self, state):
        state.page_index = 2
        state.query = "student 1"
        assert state.table.query == "student 1"
        assert state.page_index == 0
        assert 'value="student 1"' in state.html

    def test_facets_push_to_table(self, state):
        state.facet_values = {"status": ["archived"]}
        assert state.table.result.total == 4
        assert state.facet_values == {"status": ["archived"]}

    def test_page_out_of_range_pulled_back(self, state):
        state.page_index = 1
        assert state.table.pagination.page_index == 1
        state.page_index = 7
        assert state.page_index == 1

    def test_sort_params(self, state):
        state.sort_field = "name"
        state.sort_direction = "desc"
        assert state.table.sort.field == "name"
        assert state.table.sort.direction == "desc"
        state.sort_field = None
        assert state.table.sort is None

    def test_unknown_sort_field_reported(self, state):
        state.sort_field = "nope"
        assert state.status_text.startswith("Error:")
        assert state.sort_field is None

    def test_toggle_sort_command(self, state):
        state.toggle_sort("grade")
        state.toggle_sort("grade")
        assert (state.sort_field, state.sort_direction) == ("grade", "desc")

    def test_view_mode(self, state):
        state.view_mode = "grid"
        assert state.table.view_mode == "grid"
        assert 'data-view="grid"' in state.html

    def test_hidden_columns(self, state):
        state.hidden_columns = ["grade"]
        assert [c.key for c in state.table.visible_columns] == ["name", "status"]
        state.hidden_columns = []
        assert len(state.table.visible_columns) == 3

    def test_selection_mirrored(self, state):
        state.toggle_selection("s01")
        assert state.selected_ids == ["s01"]
        # direct table changes are picked up through the selection callback
        state.table.select_one("s02")
        assert state.selected_ids == ["s01", "s02"]

    def test_clear_selection_includes_filtered_out(self, state):
        state.toggle_selection("s05")
        state.facet_values = {"status": ["active"]}
        state.clear_selection()
        assert state.selected_ids == []
        assert state.table.selected_ids == []

    def test_paging_commands(self, state):
        state.next_page()
        assert state.page_index == 1
        state.previous_page()
        assert state.page_index == 0

    def test_bulk_action_status(self, student_records, columns):
        async def delete(record):
            if record["id"] == "s02":
                raise RuntimeError("locked")

        table = DataTable(
            student_records, columns,
            bulk_actions=[BulkAction("delete", "Delete", delete, per_item=True)],
        )
        state = BrowserState(table=table)
        state.toggle_selection("s01")
        state.toggle_selection("s02")
        asyncio.run(state.run_bulk_action("delete"))
        assert state.status_text == "Delete: 1 done, 1 failed"
        assert state.selected_ids == ["s02"]

    def test_unknown_bulk_action(self, state):
        asyncio.run(state.run_bulk_action("nope"))
        assert state.status_text.startswith("Error:")


class TestFacetChart:
    def test_figure_counts(self, state):
        pytest.importorskip("plotly")
        from roster_table.dashboard.chart_panel import FacetChart

        state.toggle_selection("s05")
        fig = FacetChart().figure(state)
        matching, selected = fig.data
        assert list(matching.x) == ["Active", "Archived"]
        assert list(matching.y) == [19, 4]
        assert list(selected.y) == [0, 1]

    def test_no_facets(self, student_records, columns):
        pytest.importorskip("plotly")
        from roster_table.dashboard.chart_panel import FacetChart

        state = BrowserState(table=DataTable(student_records, columns))
        assert FacetChart().figure(state) is None

    def test_unknown_facet(self, state):
        pytest.importorskip("plotly")
        from roster_table.dashboard.chart_panel import FacetChart

        with pytest.raises(KeyError):
            FacetChart("colour").figure(state)
