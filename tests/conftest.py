# File: tests/conftest.py
from __future__ import annotations

import logging
import socket
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Dict, Iterable

import pytest
import pytest_asyncio
from aiohttp import ClientSession, TCPConnector, web
from aiohttp.abc import AbstractResolver

from lib_scout.config import CrawlerConfig
from lib_scout.crawler.models import PageData
from lib_scout.logger import LOGGER_NAME

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

#: hosts the test resolver refuses to resolve
DEAD_HOSTS = frozenset({"dead.test", "unreachable.test"})


class LoopbackResolver(AbstractResolver):
    """Resolve every hostname to 127.0.0.1 except the ones listed as dead."""

    def __init__(self, dead: Iterable[str] = DEAD_HOSTS) -> None:
        self.dead = set(dead)
        self.lookups: Dict[str, int] = {}

    async def resolve(self, host: str, port: int = 0, family: int = socket.AF_INET):
        self.lookups[host] = self.lookups.get(host, 0) + 1
        if host in self.dead:
            raise OSError(f"Name or service not known: {host}")
        return [
            {
                "hostname": host,
                "host": "127.0.0.1",
                "port": port,
                "family": socket.AF_INET,
                "proto": 0,
                "flags": socket.AI_NUMERICHOST,
            }
        ]

    async def close(self) -> None:
        return None


def html(text: str, status: int = 200) -> Handler:
    """Handler returning a fixed HTML body."""

    async def handle(_: web.Request) -> web.Response:
        return web.Response(text=text, status=status, content_type="text/html")

    return handle


def virtual_host_app(sites: Dict[str, Handler]) -> web.Application:
    """One aiohttp app serving several sites, dispatched on the Host header."""
    app = web.Application()

    async def dispatch(request: web.Request) -> web.StreamResponse:
        host = request.host.split(":", 1)[0].lower()
        handler = sites.get(host)
        if handler is None:
            raise web.HTTPNotFound()
        return await handler(request)

    app.router.add_route("GET", "/{tail:.*}", dispatch)
    return app


async def serve_app(app: web.Application, port: int) -> AsyncIterator[int]:
    """Start *app* on *port*, yield the port, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield port
    finally:
        await runner.cleanup()


def make_config(port: int, **overrides) -> CrawlerConfig:
    """Config pointing search and discovered sites at the local test server."""
    values = dict(
        search_url=f"http://search.test:{port}/search",
        target_port=port,
        search_timeout=2.0,
        fetch_timeout=2.0,
        retry_backoff=0.0,
        user_agent="TestAgent/1.0",
    )
    values.update(overrides)
    return CrawlerConfig(**values)


@pytest.fixture()
def loopback_resolver() -> LoopbackResolver:
    return LoopbackResolver()


@pytest_asyncio.fixture
async def loopback_session(loopback_resolver) -> AsyncIterator[ClientSession]:
    """ClientSession whose DNS sends every non-dead host to the local server."""
    connector = TCPConnector(resolver=loopback_resolver, use_dns_cache=False)
    async with ClientSession(connector=connector) as session:
        yield session


@pytest.fixture()
def results_page() -> str:
    """Search results markup with two redirect anchors and some noise."""
    return (
        "<html><body>"
        '<a href="/url?q=http://alpha.test/page&sa=U">Alpha</a>'
        '<a href="/url?q=https://beta.test/&sa=U">Beta</a>'
        '<a href="/search?q=other">Next</a>'
        '<a href="http://gamma.test/">Direct</a>'
        "</body></html>"
    )


@pytest.fixture()
def mock_page_data() -> PageData:
    """Provide a simple PageData instance with script tags."""
    content = '<html><head><script src="/static/react.min.js"></script></head></html>'
    return PageData(url="http://alpha.test", content=content)


@pytest.fixture(autouse=True)
def reset_project_logger():
    """CLI tests reconfigure the project logger; give every test a clean one."""
    lg = logging.getLogger(LOGGER_NAME)
    saved = (lg.level, list(lg.handlers), lg.propagate)
    lg.handlers.clear()
    lg.propagate = True
    lg.setLevel(logging.NOTSET)
    yield lg
    lg.setLevel(saved[0])
    lg.handlers[:] = saved[1]
    lg.propagate = saved[2]
