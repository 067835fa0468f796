"""
HTTP client for the Advent of Code private leaderboard.

One GET per ``/advent`` invocation, authenticated with the session cookie.
No caching: every call returns a fresh snapshot.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import aiohttp

from quakebot.core.logging.logger import get_logger
from quakebot.modules.advent.models import LeaderboardSnapshot, parse_snapshot_text
from quakebot.modules.shared.exceptions import UpstreamFetchError

logger = get_logger(__name__)


class AdventClient:
    """
    Fetch and parse the leaderboard document.

    Args:
        url: Leaderboard JSON URL
        token: Value of the ``session`` cookie
        timeout_seconds: Total time allowed for one request
    """

    def __init__(self, url: str, token: str, timeout_seconds: float = 15) -> None:
        self._url = url
        self._token = token
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    @property
    def headers(self) -> dict[str, str]:
        return {"Cookie": f"session={self._token};"}

    async def fetch_body(self, http: Optional[aiohttp.ClientSession] = None) -> str:
        """
        GET the leaderboard and return the raw body.

        Raises:
            UpstreamFetchError: On connection errors, timeouts or a non-2xx status.
        """
        if http is None:
            async with aiohttp.ClientSession(timeout=self._timeout) as owned:
                return await self._get(owned)
        return await self._get(http)

    async def _get(self, http: aiohttp.ClientSession) -> str:
        try:
            async with http.get(self._url, headers=self.headers, timeout=self._timeout) as resp:
                if resp.status >= 400:
                    raise UpstreamFetchError(
                        self._url, f"HTTP {resp.status} {resp.reason}", status=resp.status
                    )
                body = await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise UpstreamFetchError(self._url, str(exc) or type(exc).__name__) from exc

        logger.debug(
            "Leaderboard fetched",
            extra={"url": self._url, "bytes": len(body)},
        )
        return body

    async def fetch_snapshot(
        self, http: Optional[aiohttp.ClientSession] = None
    ) -> LeaderboardSnapshot:
        """
        Raises:
            UpstreamFetchError: If the request failed.
            MalformedUpstreamDataError: If the body is not the expected document.
        """
        return parse_snapshot_text(await self.fetch_body(http))
