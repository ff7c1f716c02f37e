import asyncio
import copy
import json

import pytest
from aiohttp import web

from sabmon.config import Configuration

API_KEY = "test-api-key"

SAMPLE_QUEUE = {
    "status": "ok",
    "queue": {
        "status": "Downloading",
        "speed": "2.5 MB/s",
        "sizeleft": "500 MB",
        "timeleft": "00:03:20",
        "slots": [
            {
                "filename": "test_file.mkv",
                "status": "Downloading",
                "sizeleft": "500 MB",
                "percentage": "75",
                "timeleft": "00:03:20",
            }
        ],
    },
}


class MockSabnzbd:
    """Records the query of every /api call made against the mock server."""

    def __init__(self, server, queries):
        self.server = server
        self.url = f"http://{server.host}:{server.port}"
        self.queries = queries


@pytest.fixture
def sample_queue():
    return copy.deepcopy(SAMPLE_QUEUE)


@pytest.fixture
def config():
    return Configuration(
        sabnzbd_url="http://localhost:8080",
        sabnzbd_api_key=API_KEY,
        refresh_interval=5,
    )


@pytest.fixture
def sabnzbd_api(aiohttp_server):
    """Factory starting a fake SABnzbd API answering /api with a fixed reply."""

    async def start(status=200, body=None, delay=0.0):
        if body is None:
            body = json.dumps(SAMPLE_QUEUE)
        queries = []

        async def api(request: web.Request) -> web.Response:
            queries.append(dict(request.query))
            if delay:
                await asyncio.sleep(delay)
            return web.Response(
                status=status, text=body, content_type="application/json"
            )

        app = web.Application()
        app.router.add_get("/api", api)
        return MockSabnzbd(await aiohttp_server(app, access_log=None), queries)

    return start
