"""Column, facet and bulk-action definitions supplied by the host page."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from ..display_utils import prettify_name

CellRenderer = Callable[[Any, Any], str]
Accessor = Callable[[Any], Any]

VALID_VARIANTS = ("default", "destructive")


@dataclass(frozen=True)
class ColumnDefinition:
    """One displayable, sortable field of a record.

    ``cell`` receives ``(record, value)`` and returns the cell content.
    Plain strings are HTML-escaped; return ``markupsafe.Markup`` for
    trusted markup. ``accessor`` derives the value from the record when
    the field is not a plain key (e.g. a full name built from two fields).
    """

    key: str
    label: str | None = None
    cell: CellRenderer | None = None
    accessor: Accessor | None = None
    sortable: bool = True
    visible: bool = True
    hideable: bool = True
    width: int | None = None

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("Column key must be a non-empty string.")
        if self.width is not None and self.width <= 0:
            raise ValueError(f"Column '{self.key}' width must be positive, got {self.width}.")

    @property
    def display_label(self) -> str:
        return self.label if self.label else prettify_name(self.key)


@dataclass(frozen=True)
class FilterOption:
    label: str
    value: str


@dataclass(frozen=True)
class FacetFilter:
    """Multi-select filter over one field's discrete values."""

    key: str
    label: str
    options: tuple[FilterOption, ...] = ()

    @classmethod
    def from_values(cls, key: str, values: list, label: str | None = None) -> FacetFilter:
        """Build a facet whose option labels are the prettified values."""
        opts = tuple(
            FilterOption(label=prettify_name(str(v)), value=str(v)) for v in values
        )
        return cls(key=key, label=label or prettify_name(key), options=opts)

    @property
    def values(self) -> list[str]:
        return [o.value for o in self.options]


@dataclass(frozen=True)
class BulkAction:
    """An operation applied to every selected record in one step.

    ``handler`` receives the list of selected records (or a single record
    when ``per_item`` is set). It may be a coroutine function or a plain
    callable.
    """

    id: str
    label: str
    handler: Callable[..., Any]
    icon: str | None = None
    variant: str = "default"
    per_item: bool = False

    def __post_init__(self) -> None:
        if self.variant not in VALID_VARIANTS:
            raise ValueError(
                f"Invalid bulk action variant '{self.variant}'. "
                f"Must be one of {VALID_VARIANTS}."
            )
