"""ApiClient: HTTP access to the roster backend with caching and retries."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Iterable, Mapping

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..errors import ApiError
from .cache import ResponseCache
from .config import ClientConfig
from .interceptors import decode_response, request_headers

logger = logging.getLogger(__name__)

_IDEMPOTENT = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})
_BATCH_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


class ApiClient:
    """HTTP client for the roster REST backend.

    Construct one per backend and pass it to whatever needs it::

        client = ApiClient(ClientConfig.from_env(), token_provider=auth.token)
        repo = ApiRepository(client, "/students")
        await table.refresh(repo.list)

    Parameters
    ----------
    config : ClientConfig, optional
        Base URL, timeout, retry and cache settings.
    session : requests.Session, optional
        Session to send requests through; one is created when omitted.
    token_provider : callable, optional
        Returns the current bearer token, or None when signed out.
    clock : callable, optional
        Time source for the response cache.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        session: requests.Session | None = None,
        token_provider: Callable[[], str | None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or ClientConfig()
        self.token_provider = token_provider
        self._cache = ResponseCache(self.config.cache_max_entries, clock=clock)
        self._session = session if session is not None else requests.Session()
        retry = Retry(
            total=self.config.retries,
            backoff_factor=self.config.backoff_factor,
            status_forcelist=(502, 503, 504),
            allowed_methods=_IDEMPOTENT,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    # --- Plumbing ---

    def url_for(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.config.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def _token(self) -> str | None:
        if self.token_provider is None:
            return None
        return self.token_provider()

    def _send(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: Any = None,
    ) -> Any:
        url = self.url_for(endpoint)
        extra = {}
        body = None
        if data is not None:
            body = json.dumps(data)
            extra["Content-Type"] = "application/json"
        headers = request_headers(self.config, method, token=self._token(), extra=extra)
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                data=body,
                headers=headers,
                timeout=self.config.timeout,
            )
        except requests.Timeout as exc:
            raise ApiError(
                f"Request timed out after {self.config.timeout}s: {method} {url}",
                code="TIMEOUT_ERROR",
            ) from exc
        except requests.ConnectionError as exc:
            raise ApiError(
                f"Network error: {method} {url}",
                code="NETWORK_ERROR",
                details=str(exc),
            ) from exc
        except requests.RequestException as exc:
            raise ApiError(str(exc) or "Request failed", details={"url": url}) from exc
        return decode_response(response)

    @staticmethod
    def _clean_params(params: Mapping[str, Any] | None) -> dict[str, str] | None:
        if not params:
            return None
        return {k: str(v) for k, v in params.items() if v is not None}

    # --- HTTP methods ---

    def get(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        cache: bool = False,
        cache_ttl: float | None = None,
    ) -> Any:
        """GET ``endpoint``; with ``cache=True`` a fresh cached payload is reused."""
        params = self._clean_params(params)
        key = None
        if cache:
            prepared = requests.Request("GET", self.url_for(endpoint), params=params).prepare()
            key = ResponseCache.make_key("GET", prepared.url)
            hit, data = self._cache.get(key)
            if hit:
                logger.debug("Cache hit %s", key)
                return data
        data = self._send("GET", endpoint, params=params)
        if key is not None:
            ttl = self.config.cache_ttl if cache_ttl is None else cache_ttl
            self._cache.set(key, data, ttl)
        return data

    def post(self, endpoint: str, data: Any = None) -> Any:
        return self._send("POST", endpoint, data=data)

    def put(self, endpoint: str, data: Any = None) -> Any:
        return self._send("PUT", endpoint, data=data)

    def patch(self, endpoint: str, data: Any = None) -> Any:
        return self._send("PATCH", endpoint, data=data)

    def delete(self, endpoint: str, data: Any = None) -> Any:
        return self._send("DELETE", endpoint, data=data)

    def batch(self, requests_: Iterable[Mapping[str, Any]]) -> list[Any]:
        """Run several requests in order; the first failure propagates.

        Each item is ``{"endpoint": ..., "method": "GET", "data": ...}``;
        for GET, ``data`` is sent as query parameters.
        """
        results = []
        for item in requests_:
            method = str(item.get("method", "GET")).upper()
            if method not in _BATCH_METHODS:
                raise ValueError(f"Unsupported batch method '{method}'.")
            endpoint = item["endpoint"]
            data = item.get("data")
            if method == "GET":
                results.append(self.get(endpoint, params=data))
            else:
                results.append(getattr(self, method.lower())(endpoint, data))
        return results

    # --- Cache ---

    def clear_cache(self, pattern: str | None = None) -> int:
        """Drop cached responses whose key contains ``pattern`` (all when None)."""
        return self._cache.clear(pattern)

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    # --- Health ---

    def health_check(self) -> dict[str, Any]:
        """``{"status": ..., "timestamp": ...}``; failures report status ``"error"``."""
        try:
            response = self.get("/health")
        except ApiError as exc:
            logger.warning("Health check failed: %s", exc)
            return {"status": "error", "timestamp": time.time()}
        status = response.get("status") if isinstance(response, dict) else None
        return {"status": status or "ok", "timestamp": time.time()}
