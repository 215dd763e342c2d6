"""Shared test fixtures for roster-table."""

import pytest

from roster_table import BulkAction, ColumnDefinition, DataTable, FacetFilter
from roster_table.core.records import RecordFrame


@pytest.fixture
def student_records():
    """23 student records, ids s01..s23, names deliberately out of order."""
    records = []
    for i in range(1, 24):
        records.append({
            "id": f"s{i:02d}",
            # reversed so source order differs from name order
            "name": f"Student {24 - i:02d}",
            "grade": str(9 + i % 4),
            "status": "archived" if i % 5 == 0 else "active",
        })
    return records


@pytest.fixture
def name_pair():
    """The two-record set used by the basic search scenario."""
    return [
        {"id": "1", "name": "Ali Ben", "status": "active"},
        {"id": "2", "name": "Sara", "status": "archived"},
    ]


@pytest.fixture
def columns():
    return [
        ColumnDefinition("name"),
        ColumnDefinition("grade"),
        ColumnDefinition("status", sortable=False),
    ]


@pytest.fixture
def status_facet():
    return FacetFilter.from_values("status", ["active", "archived"])


@pytest.fixture
def student_frame(student_records, columns):
    return RecordFrame(student_records, columns)


@pytest.fixture
def archived_log():
    """List collecting the ids passed to the archive handler."""
    return []


@pytest.fixture
def archive_action(archived_log):
    def archive(records):
        archived_log.extend(r["id"] for r in records)

    return BulkAction("archive", "Archive", archive)


@pytest.fixture
def student_table(student_records, columns, status_facet, archive_action):
    return DataTable(
        student_records,
        columns,
        facets=[status_facet],
        bulk_actions=[archive_action],
        page_size=10,
    )
