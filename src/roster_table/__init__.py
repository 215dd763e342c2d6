"""roster-table: a sortable, filterable, paginated record browser with bulk actions."""

import logging

from ._version import __version__
from .api import DataTable
from .core.columns import BulkAction, ColumnDefinition, FacetFilter, FilterOption
from .actions.bulk import BulkOutcome, BulkResult
from .errors import ApiError, BulkActionError, RosterTableError
from .client.config import ClientConfig
from .client.api_client import ApiClient
from .repository import ApiRepository, InMemoryRepository, Repository
from .users import (
    AdminUser,
    ParentUser,
    StudentUser,
    TeacherUser,
    UserBase,
    render_user_card,
    role_details,
    user_from_dict,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())


def explore(records, columns=(), port=0, show=True, **table_kwargs):
    """Launch the interactive browser dashboard.

    Parameters
    ----------
    records : iterable
        Records to browse; each must expose an ``id``.
    columns : iterable of ColumnDefinition
        Columns to show.
    port : int
        Port number. 0 = auto-assign.
    show : bool
        Whether to open the browser automatically.
    **table_kwargs
        Passed to DataTable (facets, bulk_actions, page_size, ...).
    """
    from .dashboard.app import BrowserApp

    table = records if isinstance(records, DataTable) else DataTable(records, columns, **table_kwargs)
    app = BrowserApp(table)
    app.serve(port=port, show=show)


__all__ = [
    "__version__",
    "DataTable",
    "explore",
    "ColumnDefinition",
    "FacetFilter",
    "FilterOption",
    "BulkAction",
    "BulkOutcome",
    "BulkResult",
    "RosterTableError",
    "BulkActionError",
    "ApiError",
    "ClientConfig",
    "ApiClient",
    "Repository",
    "InMemoryRepository",
    "ApiRepository",
    "UserBase",
    "AdminUser",
    "TeacherUser",
    "StudentUser",
    "ParentUser",
    "user_from_dict",
    "role_details",
    "render_user_card",
]
