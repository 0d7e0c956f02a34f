"""
HTTP fetcher for upstream page and API calls. Wraps aiohttp with a shared
session and a bounded timeout. Callers pass any headers they need per request.
"""
from __future__ import annotations
import aiohttp
from typing import Any, Optional


class Fetcher:
    def __init__(self, *, timeout: float = 15, verify_ssl: bool = True, proxy: str | None = None):
        self.timeout = aiohttp.ClientTimeout(total=timeout, connect=4)
        self.verify_ssl = verify_ssl
        self.proxy = proxy
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                connector=aiohttp.TCPConnector(ssl=self.verify_ssl),
            )
        return self._session

    async def close(self):
        if self._session and not self._session.closed:
            await self._session.close()

    # ── convenience methods ──────────────────

    async def get(self, url: str, *, headers: dict | None = None) -> str:
        """GET ``url`` and return the body as text, whatever the status."""
        session = await self._get_session()
        async with session.get(url, headers=headers or {}, proxy=self.proxy) as resp:
            return await resp.text()

    async def post_json(
        self,
        url: str,
        *,
        json_body: Any,
        headers: dict | None = None,
    ) -> Any:
        """POST a JSON body and decode the JSON response.

        Raises ValueError when the response body is empty or not JSON.
        """
        session = await self._get_session()
        async with session.post(
            url,
            headers=headers or {},
            json=json_body,
            proxy=self.proxy,
        ) as resp:
            raw = await resp.text()
            if not raw.strip():
                raise ValueError(f"empty response body (HTTP {resp.status})")
            return await resp.json(content_type=None)
