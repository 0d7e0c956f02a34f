import asyncio

import aiohttp
import pytest

from conftest import FakeFetcher
from gdproxy.core.config import DEFAULT_UA
from gdproxy.providers.errors import BadRequest, UpstreamError
from gdproxy.providers.resolver import UpstreamResolver


@pytest.mark.parametrize("query", ["", "?file_id=", "?other=1"])
def test_missing_file_id(make_client, query):
    fetcher = FakeFetcher()
    response = make_client(fetcher=fetcher).get(f"/api/get-video{query}")
    assert response.status_code == 400
    assert response.json() == {"status": "error", "message": "Missing file_id parameter"}
    assert fetcher.calls == []


def test_upstream_json_passes_through(make_client):
    reply = {"status": "ok", "data": {"slug": "Xy9_kQ"}, "message": None, "extra": [1, 2.5, "é"]}
    fetcher = FakeFetcher(api_reply=reply)
    response = make_client(fetcher=fetcher).get("/api/get-video?file_id=1bJBs59LNjxYghoTnc")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.json() == reply


def test_upstream_error_status_is_not_interpreted(make_client):
    """An upstream error reply is still relayed with 200."""
    reply = {"status": "error", "message": "File not found"}
    response = make_client(fetcher=FakeFetcher(api_reply=reply)).get("/api/get-video?file_id=bad")
    assert response.status_code == 200
    assert response.json() == reply


def test_resolver_request_shape(make_client):
    fetcher = FakeFetcher(api_reply={"status": "ok"})
    make_client(fetcher=fetcher).get("/api/get-video?file_id=abc123")
    method, url, body, headers = fetcher.calls[0]
    assert method == "POST"
    assert url == "https://host/api/video"
    assert body == {"file_id": "abc123"}
    assert headers["Content-Type"] == "application/json"
    assert headers["User-Agent"] == DEFAULT_UA


@pytest.mark.parametrize("error, cause", [
    (aiohttp.ClientConnectionError("connection refused"), "connection refused"),
    (asyncio.TimeoutError(), "TimeoutError"),
    (ValueError("Expecting value: line 1 column 1 (char 0)"), "Expecting value: line 1 column 1 (char 0)"),
])
def test_upstream_failure_is_500_json(make_client, error, cause):
    response = make_client(fetcher=FakeFetcher(error=error)).get("/api/get-video?file_id=abc")
    assert response.status_code == 500
    assert response.json() == {
        "status": "error",
        "message": f"Failed to fetch video information: {cause}",
    }


def test_resolver_unit_errors():
    resolver = UpstreamResolver(FakeFetcher(error=aiohttp.ClientError("down")),
                                api_url="https://host/api/video", user_agent="ua")
    with pytest.raises(BadRequest):
        asyncio.run(resolver.resolve(None))
    with pytest.raises(UpstreamError) as exc:
        asyncio.run(resolver.resolve("abc"))
    assert exc.value.status_code == 500
    assert isinstance(exc.value.__cause__, aiohttp.ClientError)
