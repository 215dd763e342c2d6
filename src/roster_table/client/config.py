"""ClientConfig: settings for ApiClient."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .._version import __version__

DEFAULT_BASE_URL = "http://localhost:8000/api"


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}.") from None


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}.") from None


@dataclass(frozen=True)
class ClientConfig:
    """HTTP settings for ApiClient.

    Parameters
    ----------
    base_url : str
        Prefix for every endpoint path.
    timeout : float
        Per-request timeout in seconds.
    retries : int
        Retries for idempotent requests on connection errors and 502/503/504.
    backoff_factor : float
        urllib3 backoff factor between retries.
    cache_ttl : float
        Default lifetime in seconds of cached GET responses.
    cache_max_entries : int
        Cache capacity; the oldest entry is evicted when full.
    client_version : str
        Sent as ``X-Client-Version``.
    locale : str or None
        Sent as ``Accept-Language`` when set.
    """

    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    retries: int = 3
    backoff_factor: float = 0.5
    cache_ttl: float = 300.0
    cache_max_entries: int = 256
    client_version: str = __version__
    locale: str | None = None

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must not be empty.")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}.")
        if self.retries < 0:
            raise ValueError(f"retries must be >= 0, got {self.retries}.")
        if self.cache_ttl < 0:
            raise ValueError(f"cache_ttl must be >= 0, got {self.cache_ttl}.")
        if self.cache_max_entries < 1:
            raise ValueError(
                f"cache_max_entries must be >= 1, got {self.cache_max_entries}."
            )

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ClientConfig:
        """Build a config from ``ROSTER_*`` environment variables."""
        env = os.environ if env is None else env
        return cls(
            base_url=env.get("ROSTER_API_BASE_URL") or DEFAULT_BASE_URL,
            timeout=_env_float(env, "ROSTER_API_TIMEOUT", 30.0),
            retries=_env_int(env, "ROSTER_API_RETRIES", 3),
            cache_ttl=_env_float(env, "ROSTER_API_CACHE_TTL", 300.0),
            locale=env.get("ROSTER_LOCALE") or None,
        )
