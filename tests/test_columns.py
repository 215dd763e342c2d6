"""Tests for column/facet definitions, validation and label prettifying."""

import pytest

from roster_table import BulkAction, ColumnDefinition, FacetFilter
from roster_table.core.validation import validate_bulk_actions, validate_page_size
from roster_table.display_utils import prettify_name
from roster_table.errors import ApiError


class TestPrettifyName:
    @pytest.mark.parametrize("raw,expected", [
        ("first_name", "First Name"),
        ("student_id", "Student ID"),
        ("createdAt", "Created At"),
        ("gpa", "GPA"),
        ("archived", "Archived"),
    ])
    def test_labels(self, raw, expected):
        assert prettify_name(raw) == expected


class TestColumnDefinition:
    def test_display_label(self):
        assert ColumnDefinition("last_name").display_label == "Last Name"
        assert ColumnDefinition("dob", label="Birthday").display_label == "Birthday"

    def test_empty_key(self):
        with pytest.raises(ValueError, match="key"):
            ColumnDefinition("")

    def test_bad_width(self):
        with pytest.raises(ValueError, match="width"):
            ColumnDefinition("name", width=0)


class TestFacetFilter:
    def test_from_values(self):
        facet = FacetFilter.from_values("status", ["active", "on_leave"])
        assert facet.label == "Status"
        assert facet.values == ["active", "on_leave"]
        assert [o.label for o in facet.options] == ["Active", "On Leave"]


class TestValidation:
    def test_bulk_actions_keyed_by_id(self):
        actions = validate_bulk_actions([BulkAction("a", "A", print), BulkAction("b", "B", print)])
        assert list(actions) == ["a", "b"]

    def test_duplicate_bulk_action(self):
        with pytest.raises(ValueError):
            validate_bulk_actions([BulkAction("a", "A", print), BulkAction("a", "A2", print)])

    def test_page_size(self):
        assert validate_page_size(25) == 25
        with pytest.raises(ValueError):
            validate_page_size(True)


class TestApiError:
    def test_fields_and_repr(self):
        err = ApiError("Not found", code="404", status=404)
        assert str(err) == "Not found"
        assert repr(err) == "ApiError(code='404', status=404, message='Not found')"
        assert ApiError("x").code == "GENERIC_ERROR"
