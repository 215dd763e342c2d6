"""Tests for ViewRenderer output."""

import re

from markupsafe import Markup

from roster_table import ColumnDefinition, DataTable
from roster_table.render.renderer import SKELETON_CARDS, SKELETON_ROWS


def _row_ids(html):
    return re.findall(r'<tr data-id="([^"]+)"', str(html))


class TestTableView:
    def test_renders_current_page_only(self, student_table):
        html = student_table.render_view()
        assert _row_ids(html) == [rid for rid, _ in student_table.page_records()]
        assert len(_row_ids(html)) == 10

    def test_headers_and_sort_marker(self, student_table):
        student_table.toggle_sort("name")
        html = str(student_table.render_view())
        assert 'aria-sort="ascending"' in html
        assert "▲" in html
        assert ">Grade<" in html

    def test_hidden_column_not_rendered(self, student_table):
        student_table.set_column_visibility("grade", False)
        assert ">Grade<" not in str(student_table.render_view())

    def test_selected_rows_marked(self, student_table):
        student_table.select_one("s01")
        html = str(student_table.render_view())
        assert '<tr data-id="s01" data-action="row" class="rt-selected"' in html

    def test_skeleton_while_loading(self, student_table):
        student_table.loading = True
        html = str(student_table.render_view())
        assert html.count('class="rt-skeleton"') == SKELETON_ROWS
        assert _row_ids(html) == []

    def test_default_empty_message(self, student_table):
        student_table.set_query("zzz")
        assert "No results found." in student_table.render_view()

    def test_values_are_escaped(self, columns):
        table = DataTable([{"id": "1", "name": "<b>x</b>"}], columns)
        html = str(table.render_view())
        assert "&lt;b&gt;x&lt;/b&gt;" in html
        assert "<b>x</b>" not in html

    def test_cell_renderer_markup_trusted(self):
        col = ColumnDefinition("name", cell=lambda rec, v: Markup("<em>{}</em>").format(v))
        table = DataTable([{"id": "1", "name": "<i>"}], [col])
        assert "<em>&lt;i&gt;</em>" in str(table.render_view())

    def test_no_selection_column_when_disabled(self, student_records, columns):
        table = DataTable(student_records, columns, enable_selection=False)
        assert 'data-action="select"' not in str(table.render_view())


class TestGridView:
    def test_cards_for_current_page(self, student_table):
        student_table.set_view_mode("grid")
        html = str(student_table.render_view())
        assert len(re.findall(r'<div class="rt-card[ "][^>]*data-id=', html)) == 10

    def test_skeleton_cards(self, student_table):
        student_table.set_view_mode("grid")
        student_table.loading = True
        assert str(student_table.render_view()).count("rt-card rt-skeleton") == SKELETON_CARDS

    def test_custom_grid_renderer(self, student_records, columns):
        table = DataTable(
            student_records, columns,
            grid_item_renderer=lambda rec, selected: f"<p>{rec['name']}|{selected}</p>",
            view_modes=("grid",),
        )
        table.select_one("s01")
        html = str(table.render_view())
        assert "<p>Student 23|True</p>" in html
        assert "<p>Student 22|False</p>" in html


class TestBrowser:
    def test_toolbar_shows_facet_counts(self, student_table):
        html = str(student_table.render())
        assert 'value="archived"' in html
        assert '<span class="rt-count">4</span>' in html

    def test_bulk_buttons_only_with_selection(self, student_table):
        assert 'data-action="bulk"' not in str(student_table.render())
        student_table.select_one("s01")
        assert 'data-bulk-id="archive"' in str(student_table.render())

    def test_pager(self, student_table):
        html = str(student_table.render())
        assert "Page 1 of 3" in html
        assert 'aria-label="Go to previous page" disabled' in html

    def test_repr_html(self, student_table):
        assert student_table._repr_html_().startswith('<div class="rt-container"')
