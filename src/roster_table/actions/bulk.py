"""BulkActionRunner: dispatch one action over the materialized selection."""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from collections.abc import Iterable, Mapping
from typing import Any, Callable

from ..core.columns import BulkAction
from ..core.validation import coerce_record_id
from ..errors import BulkActionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BulkOutcome:
    """Result of a bulk action for one record."""

    id: str
    success: bool
    error: BaseException | None = None


@dataclass(frozen=True)
class BulkResult:
    """Per-record outcomes of one bulk action run."""

    action_id: str
    outcomes: tuple[BulkOutcome, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> list[str]:
        return [o.id for o in self.outcomes if o.success]

    @property
    def failed(self) -> list[str]:
        return [o.id for o in self.outcomes if not o.success]

    @property
    def ok(self) -> bool:
        return not self.failed

    def __len__(self) -> int:
        return len(self.outcomes)


async def call_handler(handler: Callable[..., Any], *args: Any) -> Any:
    """Await coroutine handlers; run plain callables in a worker thread."""
    if inspect.iscoroutinefunction(handler):
        return await handler(*args)
    result = await asyncio.to_thread(handler, *args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _outcomes_from_return(ids: list[str], returned: Any) -> list[BulkOutcome]:
    """Interpret a batch handler's return value.

    ``None`` (or anything unrecognized) means every record succeeded.
    A mapping ``{id: exception-or-None}`` or an iterable of BulkOutcome
    reports per-record results; records it does not mention succeeded.
    """
    reported: dict[str, BulkOutcome] = {}
    if isinstance(returned, Mapping):
        for rid, err in returned.items():
            rid = str(rid)
            reported[rid] = BulkOutcome(rid, err is None, err)
    elif isinstance(returned, Iterable) and not isinstance(returned, (str, bytes)):
        for item in returned:
            if isinstance(item, BulkOutcome):
                reported[item.id] = item
    return [reported.get(rid, BulkOutcome(rid, True)) for rid in ids]


class BulkActionRunner:
    """Runs a BulkAction against a list of full records.

    batch mode calls the handler once with all records. A raised
    exception aborts the run with BulkActionError. per-item mode calls
    the handler once per record and waits for all calls to settle; each
    failure is recorded in its outcome instead of raising.
    """

    @staticmethod
    async def run(action: BulkAction, records: list[Any]) -> BulkResult:
        ids = [coerce_record_id(r) for r in records]
        if not records:
            return BulkResult(action_id=action.id)

        if action.per_item:
            settled = await asyncio.gather(
                *(call_handler(action.handler, rec) for rec in records),
                return_exceptions=True,
            )
            outcomes = []
            for rid, res in zip(ids, settled):
                if isinstance(res, BaseException):
                    if not isinstance(res, Exception):
                        raise res
                    logger.warning("Bulk action '%s' failed for %s: %s", action.id, rid, res)
                    outcomes.append(BulkOutcome(rid, False, res))
                else:
                    outcomes.append(BulkOutcome(rid, True))
        else:
            try:
                returned = await call_handler(action.handler, list(records))
            except Exception as exc:
                raise BulkActionError(
                    action.id, ids, f"Bulk action '{action.id}' failed: {exc}",
                ) from exc
            outcomes = _outcomes_from_return(ids, returned)

        result = BulkResult(action_id=action.id, outcomes=tuple(outcomes))
        logger.info(
            "Bulk action '%s' finished: %d succeeded, %d failed",
            action.id, len(result.succeeded), len(result.failed),
        )
        return result
