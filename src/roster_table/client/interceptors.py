"""Request and response hooks applied to every ApiClient call."""

from __future__ import annotations

import time
import uuid
from typing import Any

import requests

from ..errors import ApiError
from .config import ClientConfig


def generate_request_id() -> str:
    return f"req_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def request_headers(
    config: ClientConfig,
    method: str,
    token: str | None = None,
    extra: dict[str, str] | None = None,
) -> dict[str, str]:
    """Headers for one outgoing request."""
    headers = {
        "X-Request-Timestamp": str(int(time.time() * 1000)),
        "X-Request-ID": generate_request_id(),
        "X-Client-Version": config.client_version,
        "X-Client-Platform": "python",
    }
    if config.locale:
        headers["Accept-Language"] = config.locale
    if method.upper() == "GET":
        headers["Cache-Control"] = "no-cache"
    if token:
        headers["Authorization"] = f"Bearer {token}"
    if extra:
        headers.update(extra)
    return headers


def decode_response(response: requests.Response) -> Any:
    """Decode by content type; non-2xx responses raise ApiError."""
    content_type = response.headers.get("Content-Type", "")
    if "application/json" in content_type:
        try:
            data = response.json()
        except ValueError:
            data = response.text
    elif "application/octet-stream" in content_type:
        data = response.content
    else:
        data = response.text

    if not response.ok:
        message = None
        if isinstance(data, dict):
            message = data.get("message")
        if not message:
            message = f"HTTP {response.status_code}: {response.reason}"
        raise ApiError(
            message,
            code=str(response.status_code),
            status=response.status_code,
            details={
                "url": response.url,
                "headers": dict(response.headers),
                "data": data,
            },
        )
    return data
