"""Shared fixtures: mock Hacker News server, settings and cache."""

import asyncio
import socket
import threading
import time
from collections.abc import Generator
from contextlib import closing
from pathlib import Path

import pytest
from aiohttp import web

from hncli.cache import CacheStore
from hncli.scraper import HackerNewsScraper
from hncli.settings import Settings
from tests.mock_server import create_app


def find_free_port() -> int:
    """Find a free port on localhost.

    Returns:
        An available port number.
    """
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class AioHttpTestServer:
    """Wrapper to run aiohttp server in a background thread."""

    def __init__(self, app: web.Application, port: int) -> None:
        self.app = app
        self.port = port
        self.host = "127.0.0.1"
        self._loop: asyncio.AbstractEventLoop | None = None
        self._runner: web.AppRunner | None = None
        self._thread: threading.Thread | None = None
        self._started = threading.Event()

    @property
    def url(self) -> str:
        """Get the base URL of the server."""
        return f"http://{self.host}:{self.port}"

    def start(self) -> None:
        """Start the server in a background thread."""
        self._thread = threading.Thread(target=self._run_server, daemon=True)
        self._thread.start()
        if not self._started.wait(timeout=5.0):
            raise RuntimeError("Mock server did not start")
        # Give the listener a moment to accept connections
        time.sleep(0.05)

    def _run_server(self) -> None:
        """Run the server in an asyncio event loop."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        async def start() -> None:
            self._runner = web.AppRunner(self.app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, self.host, self.port)
            await site.start()

        self._loop.run_until_complete(start())
        self._started.set()
        self._loop.run_forever()

    def stop(self) -> None:
        """Stop the server and clean up resources."""
        if self._loop and self._runner:
            future = asyncio.run_coroutine_threadsafe(
                self._runner.cleanup(), self._loop
            )
            future.result(timeout=2.0)

        if self._loop:
            self._loop.call_soon_threadsafe(self._loop.stop)

        if self._thread:
            self._thread.join(timeout=2.0)


def _serve(app: web.Application) -> Generator[AioHttpTestServer, None, None]:
    server = AioHttpTestServer(app, find_free_port())
    server.start()
    yield server
    server.stop()


@pytest.fixture
def hn_server() -> Generator[AioHttpTestServer, None, None]:
    """Run the mock Hacker News site on a random port.

    Yields:
        AioHttpTestServer instance serving the mock site.
    """
    yield from _serve(create_app())


@pytest.fixture
def server_url(hn_server: AioHttpTestServer) -> str:
    """Base URL of the mock site (e.g., "http://127.0.0.1:8080")."""
    return hn_server.url


@pytest.fixture
def flaky_server_url() -> Generator[str, None, None]:
    """Base URL of a mock site whose listing page 2 answers HTTP 500."""
    for server in _serve(create_app(failing_pages=frozenset({2}))):
        yield server.url


@pytest.fixture
def cache_path(tmp_path: Path) -> Path:
    """Cache file location inside the test's temp dir (not created)."""
    return tmp_path / "cache" / "hn-cli" / "stories.cache"


@pytest.fixture
def settings(server_url: str, cache_path: Path) -> Settings:
    """Settings pointing at the mock site and a temporary cache."""
    return Settings(base_url=server_url, cache_path=cache_path)


@pytest.fixture
def cache(cache_path: Path) -> CacheStore:
    return CacheStore(cache_path)


@pytest.fixture
def scraper() -> HackerNewsScraper:
    """Extractors resolving relative links against the real site root."""
    return HackerNewsScraper()
