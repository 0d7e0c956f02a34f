"""gdplayer embed page: ng-init player call → (server url, video id)."""
from __future__ import annotations
import asyncio
import logging
import re

import aiohttp

from .base import EmbedToken, slug_segment
from .errors import ExtractionError, UpstreamError, describe
from .fetcher import Fetcher

log = logging.getLogger("gdproxy.providers.extractor")

# init('<ignored>', '<server url>', '<video id>'
INIT_RE = re.compile(r"init\('[^']+', '([^']+)', '([^']+)'")


def extract_embed_token(html: str) -> EmbedToken:
    """Pull the media server and video id out of raw embed page HTML.

    Plain regex on the markup. Swap INIT_RE if the upstream page changes.
    """
    m = INIT_RE.search(html)
    if not m:
        raise ExtractionError("Could not extract video information")
    return EmbedToken(server_url=m.group(1), video_id=m.group(2))


class EmbedExtractor:
    def __init__(self, fetcher: Fetcher, *, embed_base: str):
        self.fetcher = fetcher
        self.embed_base = embed_base.rstrip("/")

    def embed_url(self, slug: str) -> str:
        return f"{self.embed_base}/{slug_segment(slug)}"

    async def fetch(self, slug: str) -> EmbedToken:
        url = self.embed_url(slug)
        try:
            html = await self.fetcher.get(url)
        except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError) as e:
            log.warning(f"[extractor] {slug}: embed page fetch failed: {e!r}")
            raise UpstreamError(f"Error streaming video: {describe(e)}") from e

        try:
            token = extract_embed_token(html)
        except ExtractionError:
            log.warning(f"[extractor] {slug}: player init not found in embed page")
            raise
        log.info(f"[extractor] {slug} → {token.server_url} ({token.video_id})")
        return token
