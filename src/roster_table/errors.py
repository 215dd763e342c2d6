"""Exception types raised by roster-table."""

from __future__ import annotations

from typing import Any


class RosterTableError(Exception):
    """Base class for package-specific errors."""


class BulkActionError(RosterTableError):
    """A bulk action handler failed as a whole.

    The selection is left as it was so the caller can retry.
    """

    def __init__(self, action_id: str, record_ids: list[str], message: str) -> None:
        super().__init__(message)
        self.action_id = action_id
        self.record_ids = list(record_ids)


class ApiError(RosterTableError):
    """Normalized HTTP/network failure from ApiClient."""

    def __init__(
        self,
        message: str,
        code: str = "GENERIC_ERROR",
        status: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.details = details

    def __repr__(self) -> str:
        return f"ApiError(code={self.code!r}, status={self.status!r}, message={self.message!r})"
