"""Input validation with clear error messages for host pages."""

from __future__ import annotations

from typing import Any, Iterable

from .columns import ColumnDefinition, FacetFilter, BulkAction


def _preview(items: list) -> str:
    return f"{items[:5]}" + (f" (and {len(items) - 5} more)" if len(items) > 5 else "")


def validate_record_ids(ids: list[str]) -> list[str]:
    """Validate that every record id is present and unique.

    Returns the ids unchanged.
    """
    seen: set[str] = set()
    dupes: list[str] = []
    for rid in ids:
        if rid in seen and rid not in dupes:
            dupes.append(rid)
        seen.add(rid)
    if dupes:
        raise ValueError(f"Record IDs must be unique. Found duplicates: {_preview(dupes)}")
    return ids


def coerce_record_id(record: Any) -> str:
    """Return the record's ``id`` as a string, raising TypeError if it has none."""
    if isinstance(record, dict):
        rid = record.get("id")
    else:
        rid = getattr(record, "id", None)
    if rid is None or rid == "":
        raise TypeError(
            f"Every record must expose a non-empty 'id'. Got {type(record).__name__}: "
            f"{record!r:.80}"
        )
    return str(rid)


def validate_columns(columns: Iterable[Any]) -> list[ColumnDefinition]:
    """Validate column definitions (type and unique keys)."""
    columns = list(columns)
    for col in columns:
        if not isinstance(col, ColumnDefinition):
            raise TypeError(
                f"Expected ColumnDefinition, got {type(col).__name__}. "
                "Wrap plain keys with ColumnDefinition(key=...)."
            )
    keys = [c.key for c in columns]
    dupes = sorted({k for k in keys if keys.count(k) > 1})
    if dupes:
        raise ValueError(f"Column keys must be unique. Found duplicates: {_preview(dupes)}")
    return columns


def validate_facets(facets: Iterable[Any]) -> list[FacetFilter]:
    facets = list(facets)
    for facet in facets:
        if not isinstance(facet, FacetFilter):
            raise TypeError(f"Expected FacetFilter, got {type(facet).__name__}.")
    keys = [f.key for f in facets]
    if len(set(keys)) != len(keys):
        raise ValueError(f"Facet keys must be unique, got {keys}.")
    return facets


def validate_bulk_actions(actions: Iterable[Any]) -> dict[str, BulkAction]:
    """Validate bulk actions and return them keyed by id, in given order."""
    result: dict[str, BulkAction] = {}
    for action in actions:
        if not isinstance(action, BulkAction):
            raise TypeError(f"Expected BulkAction, got {type(action).__name__}.")
        if action.id in result:
            raise ValueError(f"Bulk action ids must be unique. Duplicate: '{action.id}'.")
        result[action.id] = action
    return result


def validate_page_size(page_size: Any) -> int:
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
        raise ValueError(f"page_size must be a positive integer, got {page_size!r}.")
    return page_size
