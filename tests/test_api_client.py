"""Tests for ClientConfig, ResponseCache and ApiClient (HTTP is faked)."""

import json

import pytest
import requests

from roster_table.client.api_client import ApiClient
from roster_table.client.cache import ResponseCache
from roster_table.client.config import ClientConfig
from roster_table.errors import ApiError


def make_response(status=200, body=None, content_type="application/json", reason="OK",
                  url="http://api.test/x"):
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response.url = url
    response.encoding = "utf-8"
    response.headers["Content-Type"] = content_type
    if isinstance(body, bytes):
        response._content = body
    elif content_type == "application/json":
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = (body or "").encode("utf-8")
    return response


class FakeSession:
    """Stands in for requests.Session; replays queued responses or errors."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.mounted = []

    def mount(self, prefix, adapter):
        self.mounted.append(prefix)

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def config():
    return ClientConfig(base_url="http://api.test/v1", cache_ttl=60, locale="fr-FR")


class TestClientConfig:
    def test_from_env(self):
        cfg = ClientConfig.from_env({
            "ROSTER_API_BASE_URL": "https://school.example/api",
            "ROSTER_API_TIMEOUT": "5",
            "ROSTER_API_RETRIES": "0",
            "ROSTER_API_CACHE_TTL": "12.5",
            "ROSTER_LOCALE": "ar",
        })
        assert cfg.base_url == "https://school.example/api"
        assert cfg.timeout == 5.0
        assert cfg.retries == 0
        assert cfg.cache_ttl == 12.5
        assert cfg.locale == "ar"

    def test_from_env_defaults(self):
        cfg = ClientConfig.from_env({})
        assert cfg == ClientConfig()

    def test_bad_env_value(self):
        with pytest.raises(ValueError, match="ROSTER_API_TIMEOUT"):
            ClientConfig.from_env({"ROSTER_API_TIMEOUT": "soon"})

    def test_validation(self):
        with pytest.raises(ValueError, match="timeout"):
            ClientConfig(timeout=0)
        with pytest.raises(ValueError, match="cache_max_entries"):
            ClientConfig(cache_max_entries=0)


class TestResponseCache:
    def test_hit_then_expire(self):
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        cache.set("k", {"a": 1}, ttl=10)
        assert cache.get("k") == (True, {"a": 1})
        clock.now += 11
        assert cache.get("k") == (False, None)
        assert len(cache) == 0

    def test_cached_none_is_a_hit(self):
        cache = ResponseCache()
        cache.set("k", None, ttl=10)
        assert cache.get("k") == (True, None)

    def test_bounded_evicts_oldest(self):
        cache = ResponseCache(max_entries=2)
        cache.set("a", 1, ttl=100)
        cache.set("b", 2, ttl=100)
        cache.set("c", 3, ttl=100)
        assert "a" not in cache
        assert "b" in cache and "c" in cache

    def test_expired_evicted_on_insert(self):
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        cache.set("old", 1, ttl=1)
        clock.now += 5
        cache.set("new", 2, ttl=1)
        assert len(cache) == 1

    def test_clear_pattern(self):
        cache = ResponseCache()
        cache.set("GET:http://x/students:", 1, ttl=100)
        cache.set("GET:http://x/teachers:", 2, ttl=100)
        assert cache.clear("students") == 1
        assert len(cache) == 1
        assert cache.clear() == 1

    def test_make_key(self):
        assert ResponseCache.make_key("get", "http://x/a", "{}") == "GET:http://x/a:{}"


class TestApiClientRequests:
    def test_get_builds_url_and_headers(self, config):
        session = FakeSession(make_response(body={"ok": True}))
        client = ApiClient(config, session=session, token_provider=lambda: "tok")
        assert client.get("/students", params={"page": 2, "q": None}) == {"ok": True}
        call = session.calls[0]
        assert call["method"] == "GET"
        assert call["url"] == "http://api.test/v1/students"
        assert call["params"] == {"page": "2"}
        assert call["timeout"] == config.timeout
        headers = call["headers"]
        assert headers["Authorization"] == "Bearer tok"
        assert headers["Cache-Control"] == "no-cache"
        assert headers["Accept-Language"] == "fr-FR"
        assert headers["X-Client-Platform"] == "python"
        assert headers["X-Request-ID"].startswith("req_")
        assert "X-Request-Timestamp" in headers

    def test_adapters_mounted(self, config):
        session = FakeSession()
        ApiClient(config, session=session)
        assert session.mounted == ["http://", "https://"]

    def test_post_sends_json(self, config):
        session = FakeSession(make_response(status=201, body={"id": "9"}))
        client = ApiClient(config, session=session)
        assert client.post("students", {"name": "Ali"}) == {"id": "9"}
        call = session.calls[0]
        assert call["data"] == json.dumps({"name": "Ali"})
        assert call["headers"]["Content-Type"] == "application/json"
        assert "Cache-Control" not in call["headers"]
        assert "Authorization" not in call["headers"]

    def test_text_and_bytes_responses(self, config):
        session = FakeSession(
            make_response(body="pong", content_type="text/plain"),
            make_response(body=b"\x00\x01", content_type="application/octet-stream"),
        )
        client = ApiClient(config, session=session)
        assert client.get("/ping") == "pong"
        assert client.get("/file") == b"\x00\x01"

    def test_absolute_url_kept(self, config):
        client = ApiClient(config, session=FakeSession())
        assert client.url_for("https://other.test/a") == "https://other.test/a"

    def test_batch(self, config):
        session = FakeSession(
            make_response(body=[1]), make_response(body={"id": "1"}),
        )
        client = ApiClient(config, session=session)
        results = client.batch([
            {"endpoint": "/a", "data": {"x": 1}},
            {"endpoint": "/b", "method": "patch", "data": {"y": 2}},
        ])
        assert results == [[1], {"id": "1"}]
        assert [c["method"] for c in session.calls] == ["GET", "PATCH"]
        assert session.calls[0]["params"] == {"x": "1"}

    def test_batch_rejects_unknown_method(self, config):
        client = ApiClient(config, session=FakeSession())
        with pytest.raises(ValueError, match="TRACE"):
            client.batch([{"endpoint": "/a", "method": "trace"}])


class TestApiClientErrors:
    def test_http_error_uses_server_message(self, config):
        session = FakeSession(make_response(status=404, body={"message": "No such student"},
                                            reason="Not Found"))
        client = ApiClient(config, session=session)
        with pytest.raises(ApiError) as info:
            client.get("/students/9")
        assert info.value.message == "No such student"
        assert info.value.code == "404"
        assert info.value.status == 404

    def test_http_error_without_message(self, config):
        session = FakeSession(make_response(status=500, body="oops", content_type="text/html",
                                            reason="Internal Server Error"))
        client = ApiClient(config, session=session)
        with pytest.raises(ApiError, match="HTTP 500: Internal Server Error"):
            client.delete("/students/1")

    def test_timeout(self, config):
        client = ApiClient(config, session=FakeSession(requests.Timeout("slow")))
        with pytest.raises(ApiError) as info:
            client.get("/students")
        assert info.value.code == "TIMEOUT_ERROR"

    def test_connection_error(self, config):
        client = ApiClient(config, session=FakeSession(requests.ConnectionError("refused")))
        with pytest.raises(ApiError) as info:
            client.put("/students/1", {"name": "x"})
        assert info.value.code == "NETWORK_ERROR"

    def test_health_check(self, config):
        session = FakeSession(
            make_response(body={"status": "healthy"}),
            requests.ConnectionError("down"),
        )
        client = ApiClient(config, session=session)
        assert client.health_check()["status"] == "healthy"
        assert client.health_check()["status"] == "error"


class TestApiClientCache:
    def test_cached_get_reused_until_ttl(self, config):
        clock = FakeClock()
        session = FakeSession(make_response(body=[1]), make_response(body=[2]))
        client = ApiClient(config, session=session, clock=clock)
        assert client.get("/students", cache=True) == [1]
        assert client.get("/students", cache=True) == [1]
        assert len(session.calls) == 1
        clock.now += 61
        assert client.get("/students", cache=True) == [2]
        assert len(session.calls) == 2

    def test_custom_ttl(self, config):
        clock = FakeClock()
        session = FakeSession(make_response(body=[1]), make_response(body=[2]))
        client = ApiClient(config, session=session, clock=clock)
        client.get("/students", cache=True, cache_ttl=5)
        clock.now += 6
        assert client.get("/students", cache=True) == [2]

    def test_params_are_part_of_key(self, config):
        session = FakeSession(make_response(body=[1]), make_response(body=[2]))
        client = ApiClient(config, session=session)
        assert client.get("/students", {"page": 1}, cache=True) == [1]
        assert client.get("/students", {"page": 2}, cache=True) == [2]
        assert client.cache_size == 2

    def test_failures_not_cached(self, config):
        session = FakeSession(
            make_response(status=503, body={}, reason="Unavailable"),
            make_response(body=[1]),
        )
        client = ApiClient(config, session=session)
        with pytest.raises(ApiError):
            client.get("/students", cache=True)
        assert client.cache_size == 0
        assert client.get("/students", cache=True) == [1]

    def test_uncached_get_not_stored(self, config):
        client = ApiClient(config, session=FakeSession(make_response(body=[1])))
        client.get("/students")
        assert client.cache_size == 0

    def test_clear_cache(self, config):
        session = FakeSession(make_response(body=[1]), make_response(body=[2]))
        client = ApiClient(config, session=session)
        client.get("/students", cache=True)
        client.get("/teachers", cache=True)
        assert client.clear_cache("students") == 1
        assert client.cache_size == 1
