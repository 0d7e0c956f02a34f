"""Upstream resolver: Google Drive file id → gdplayer slug via the JSON API."""
from __future__ import annotations
import asyncio
import logging
from typing import Any

import aiohttp

from .errors import BadRequest, UpstreamError, describe
from .fetcher import Fetcher

log = logging.getLogger("gdproxy.providers.resolver")


class UpstreamResolver:
    def __init__(self, fetcher: Fetcher, *, api_url: str, user_agent: str):
        self.fetcher = fetcher
        self.api_url = api_url
        self.user_agent = user_agent

    async def resolve(self, file_id: str | None) -> Any:
        """Return the upstream JSON for ``file_id`` untouched.

        The upstream ``status`` field is not checked; callers get whatever the
        API said, including its own error replies.
        """
        if not file_id:
            raise BadRequest("Missing file_id parameter")

        headers = {
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }
        try:
            data = await self.fetcher.post_json(
                self.api_url, json_body={"file_id": file_id}, headers=headers)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            log.warning(f"[resolver] {file_id}: {e!r}")
            raise UpstreamError(f"Failed to fetch video information: {describe(e)}") from e

        log.info(f"[resolver] {file_id} resolved")
        return data
