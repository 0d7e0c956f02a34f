import dataclasses

import httpx
import pytest
from fastapi.testclient import TestClient

from gdproxy.api.main import create_app
from gdproxy.core.config import Settings

EMBED_HOST = "host"


class FakeFetcher:
    """Stands in for the aiohttp Fetcher; serves canned pages and API replies."""

    def __init__(self, pages=None, api_reply=None, error=None):
        self.pages = pages or {}
        self.api_reply = api_reply
        self.error = error
        self.calls = []
        self.closed = False

    async def get(self, url, *, headers=None):
        self.calls.append(("GET", url, headers))
        if self.error:
            raise self.error
        return self.pages.get(url, "<html><body>nothing here</body></html>")

    async def post_json(self, url, *, json_body, headers=None):
        self.calls.append(("POST", url, json_body, headers))
        if self.error:
            raise self.error
        return self.api_reply

    async def close(self):
        self.closed = True


class AsyncBody(httpx.AsyncByteStream):
    """Chunked async body, like a real network response (read once, never buffered)."""

    def __init__(self, body, chunk_size=4):
        self.body = body
        self.chunk_size = chunk_size

    async def __aiter__(self):
        for i in range(0, len(self.body), self.chunk_size):
            yield self.body[i:i + self.chunk_size]


class MediaUpstream:
    """httpx MockTransport handler that records media requests."""

    def __init__(self, status=200, headers=None, body=b"\x00\x00\x00\x18ftypmp42", error=None):
        self.status = status
        self.headers = headers if headers is not None else {"Content-Type": "video/mp4"}
        self.body = body
        self.error = error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error:
            raise self.error
        headers = {"Content-Length": str(len(self.body)), **self.headers}
        return httpx.Response(self.status, headers=headers, stream=AsyncBody(self.body))


def embed_page(server="https://srv1", video_id="vid123"):
    return (
        '<html><body><div ng-app="app" '
        f"ng-init=\"init('eyJpdiI6', '{server}', '{video_id}', 'extra')\">"
        "</div></body></html>"
    )


@pytest.fixture
def settings():
    return Settings(upstream_host=EMBED_HOST, resolver_url=f"https://{EMBED_HOST}/api/video")


@pytest.fixture
def make_client(settings):
    def _make(fetcher=None, media=None, **overrides):
        fetcher = fetcher or FakeFetcher()
        media = media or MediaUpstream()
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(media))
        cfg = dataclasses.replace(settings, **overrides)
        return TestClient(create_app(cfg, fetcher=fetcher, http_client=http_client))
    return _make
