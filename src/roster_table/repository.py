"""Record repositories: where a DataTable's collection comes from."""

from __future__ import annotations

import copy
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping

from .client.api_client import ApiClient
from .core.validation import coerce_record_id

logger = logging.getLogger(__name__)


class Repository(ABC):
    """CRUD interface over one record collection.

    ``list`` is what a DataTable refresh loads::

        await table.refresh(repository.list)
    """

    @abstractmethod
    def get(self, record_id: str) -> dict:
        raise NotImplementedError

    @abstractmethod
    def list(self) -> list[dict]:
        raise NotImplementedError

    @abstractmethod
    def create(self, data: Mapping[str, Any]) -> dict:
        raise NotImplementedError

    @abstractmethod
    def update(self, record_id: str, changes: Mapping[str, Any]) -> dict:
        raise NotImplementedError

    @abstractmethod
    def delete(self, record_id: str) -> None:
        raise NotImplementedError


class InMemoryRepository(Repository):
    """Dict-backed repository.

    Records go in and come out as deep copies, so callers never share
    state with the store. Records created without an ``id`` get one.
    """

    def __init__(self, records=(), id_prefix: str = "rec") -> None:
        self._records: dict[str, dict] = {}
        self._id_prefix = id_prefix
        self._counter = itertools.count(1)
        for record in records:
            self.create(record)

    def _next_id(self) -> str:
        while True:
            rid = f"{self._id_prefix}-{next(self._counter)}"
            if rid not in self._records:
                return rid

    def _require(self, record_id: str) -> dict:
        record_id = str(record_id)
        if record_id not in self._records:
            raise KeyError(f"Record '{record_id}' not found.")
        return self._records[record_id]

    def get(self, record_id: str) -> dict:
        return copy.deepcopy(self._require(record_id))

    def list(self) -> list[dict]:
        return [copy.deepcopy(r) for r in self._records.values()]

    def create(self, data: Mapping[str, Any]) -> dict:
        record = copy.deepcopy(dict(data))
        if record.get("id") in (None, ""):
            record["id"] = self._next_id()
        rid = coerce_record_id(record)
        if rid in self._records:
            raise ValueError(f"Record '{rid}' already exists.")
        self._records[rid] = record
        return copy.deepcopy(record)

    def update(self, record_id: str, changes: Mapping[str, Any]) -> dict:
        record = self._require(record_id)
        changes = dict(changes)
        if "id" in changes and str(changes["id"]) != str(record_id):
            raise ValueError("A record's id cannot be changed.")
        record.update(copy.deepcopy(changes))
        return copy.deepcopy(record)

    def delete(self, record_id: str) -> None:
        self._require(record_id)
        del self._records[str(record_id)]

    def __len__(self) -> int:
        return len(self._records)


def _unwrap(payload: Any) -> Any:
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


class ApiRepository(Repository):
    """REST-backed repository: ``endpoint`` and ``endpoint/{id}`` paths.

    Responses shaped ``{"data": ...}`` are unwrapped. ``list`` reads
    through the client's GET cache; writes clear the cached entries for
    this endpoint.
    """

    def __init__(self, client: ApiClient, endpoint: str, cache: bool = False) -> None:
        self.client = client
        self.endpoint = "/" + endpoint.strip("/")
        self.cache = cache

    def _item(self, record_id: str) -> str:
        return f"{self.endpoint}/{record_id}"

    def _invalidate(self) -> None:
        dropped = self.client.clear_cache(self.endpoint)
        if dropped:
            logger.debug("Cleared %d cached responses for %s", dropped, self.endpoint)

    def get(self, record_id: str) -> dict:
        return _unwrap(self.client.get(self._item(record_id)))

    def list(self) -> list[dict]:
        payload = _unwrap(self.client.get(self.endpoint, cache=self.cache))
        if not isinstance(payload, list):
            raise TypeError(
                f"Expected a list from {self.endpoint}, got {type(payload).__name__}."
            )
        return payload

    def create(self, data: Mapping[str, Any]) -> dict:
        record = _unwrap(self.client.post(self.endpoint, dict(data)))
        self._invalidate()
        return record

    def update(self, record_id: str, changes: Mapping[str, Any]) -> dict:
        record = _unwrap(self.client.patch(self._item(record_id), dict(changes)))
        self._invalidate()
        return record

    def delete(self, record_id: str) -> None:
        self.client.delete(self._item(record_id))
        self._invalidate()
