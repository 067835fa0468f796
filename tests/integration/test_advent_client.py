"""
Integration Tests for AdventClient
==================================

Runs the client against aiohttp's in-process test server.
"""

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from quakebot.modules.advent.client import AdventClient
from quakebot.modules.shared.exceptions import MalformedUpstreamDataError, UpstreamFetchError

pytestmark = pytest.mark.integration

LEADERBOARD = {
    "event": "2024",
    "members": {
        "1": {"name": "amy", "local_score": 3, "stars": 2, "completion_day_level": {"1": {}}},
        "2": {"name": None, "local_score": 0, "stars": 0, "completion_day_level": {}},
    },
}


def make_app(handler):
    app = web.Application()
    app.router.add_get("/leaderboard.json", handler)
    return app


class TestFetchSnapshot:
    async def test_sends_session_cookie_and_parses(self):
        seen = {}

        async def handler(request):
            seen["cookie"] = request.headers.get("Cookie")
            return web.json_response(LEADERBOARD)

        async with test_utils.TestServer(make_app(handler)) as server:
            client = AdventClient(str(server.make_url("/leaderboard.json")), "abc123", 5)
            snapshot = await client.fetch_snapshot()

        assert seen["cookie"] == "session=abc123;"
        assert [m.display_name for m in snapshot.members] == ["amy", "(anonymous user #2)"]

    async def test_error_status(self):
        async def handler(request):
            return web.Response(status=500, text="oops")

        async with test_utils.TestServer(make_app(handler)) as server:
            client = AdventClient(str(server.make_url("/leaderboard.json")), "abc123", 5)
            with pytest.raises(UpstreamFetchError) as exc_info:
                await client.fetch_snapshot()

        assert exc_info.value.status == 500

    async def test_html_body_is_malformed(self):
        async def handler(request):
            return web.Response(text="<html>please log in</html>", content_type="text/html")

        async with test_utils.TestServer(make_app(handler)) as server:
            client = AdventClient(str(server.make_url("/leaderboard.json")), "abc123", 5)
            with pytest.raises(MalformedUpstreamDataError):
                await client.fetch_snapshot()

    async def test_timeout(self):
        async def handler(request):
            await asyncio.sleep(1)
            return web.json_response(LEADERBOARD)

        async with test_utils.TestServer(make_app(handler)) as server:
            client = AdventClient(str(server.make_url("/leaderboard.json")), "abc123", 0.2)
            with pytest.raises(UpstreamFetchError):
                await client.fetch_snapshot()

    async def test_connection_refused(self):
        async def handler(request):
            return web.Response()

        async with test_utils.TestServer(make_app(handler)) as server:
            url = str(server.make_url("/leaderboard.json"))

        client = AdventClient(url, "abc123", 2)
        with pytest.raises(UpstreamFetchError):
            await client.fetch_snapshot()
