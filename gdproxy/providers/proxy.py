"""
Stream proxy: embed token → upstream media request → raw byte relay.

The upstream answer (status, end-to-end headers, raw body) is handed back so range
requests, partial content and content-length keep working for the browser.
"""
from __future__ import annotations
import logging
from typing import AsyncIterator, Mapping

import httpx

from .base import StreamTarget, slug_segment
from .errors import ProxyError, describe
from .extractor import EmbedExtractor

log = logging.getLogger("gdproxy.providers.proxy")

# Per-connection headers; the ASGI server frames the relayed body itself.
HOP_BY_HOP = frozenset({
    "connection", "keep-alive", "proxy-authenticate", "proxy-authorization",
    "te", "trailer", "transfer-encoding", "upgrade",
})

RANGE_HEADERS = ("Range", "If-Range")


class StreamProxy:
    def __init__(self, extractor: EmbedExtractor, client: httpx.AsyncClient, *,
                 user_agent: str, forward_range: bool = True):
        self.extractor = extractor
        self.client = client
        self.user_agent = user_agent
        self.forward_range = forward_range

    def upstream_headers(self, slug: str, client_headers: Mapping[str, str]) -> dict[str, str]:
        headers = {
            "Referer": f"{self.extractor.embed_base}/{slug_segment(slug)}",
            "User-Agent": client_headers.get("user-agent") or self.user_agent,
        }
        if self.forward_range:
            for name in RANGE_HEADERS:
                value = client_headers.get(name.lower())
                if value:
                    headers[name] = value
        return headers

    async def build_request(self, target: StreamTarget,
                            client_headers: Mapping[str, str]) -> httpx.Request:
        """Resolve the embed token and build the media request.

        Extractor failures propagate unchanged.
        """
        token = await self.extractor.fetch(target.slug)
        url = token.media_url(target.quality)
        headers = self.upstream_headers(target.slug, client_headers)
        try:
            return self.client.build_request("GET", url, headers=headers)
        except (httpx.InvalidURL, ValueError) as e:
            log.warning(f"[proxy] {target.slug}: bad media url {url!r}: {e!r}")
            raise ProxyError(f"Error streaming video: {describe(e)}") from e

    async def open(self, target: StreamTarget,
                   client_headers: Mapping[str, str]) -> httpx.Response:
        """Send the media request and return the unread, streaming response.

        The caller owns the response and must close it.
        """
        request = await self.build_request(target, client_headers)
        try:
            upstream = await self.client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log.warning(f"[proxy] {target.slug}/{target.quality}: {e!r}")
            raise ProxyError(f"Error streaming video: {describe(e)}") from e

        log.info(f"[proxy] {target.slug}/{target.quality} → HTTP {upstream.status_code}")
        return upstream


def response_headers(upstream: httpx.Response) -> dict[str, str]:
    return {k: v for k, v in upstream.headers.items() if k.lower() not in HOP_BY_HOP}


async def relay(upstream: httpx.Response) -> AsyncIterator[bytes]:
    """Yield the upstream body without decoding it. Always closes the response."""
    try:
        async for chunk in upstream.aiter_raw():
            yield chunk
    except httpx.HTTPError as e:
        log.warning(f"[proxy] relay interrupted: {e!r}")
        raise
    finally:
        await upstream.aclose()
