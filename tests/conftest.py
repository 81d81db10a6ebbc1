import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Union

import pytest
import httpx
from aiohttp import web

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from govanity.errors import DNSError
from govanity.models import AnswerRecord


def txt(*strings: str) -> AnswerRecord:
    return AnswerRecord(rdtype="TXT", strings=tuple(strings))


class FakeClock:
    """Manually advanced stand-in for ``time.monotonic``."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTXTClient:
    """DNS dependency returning canned answers per name and counting exchanges.

    An answer may be a list of records or an exception instance to raise.
    """

    def __init__(self, answers: Dict[str, Union[List[AnswerRecord], Exception]] | None = None):
        self.answers = dict(answers or {})
        self.calls: List[str] = []
        self.delay = 0.0

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def exchange(self, name: str, resolver: str) -> List[AnswerRecord]:
        self.calls.append(name)
        if self.delay:
            await asyncio.sleep(self.delay)
        answer = self.answers.get(name, [])
        if isinstance(answer, Exception):
            raise answer
        return list(answer)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_dns():
    return FakeTXTClient(
        {
            "example.org": [txt("go-import example.org/foo git https://github.com/example/foo")],
            "multi.example": [
                txt("go-import multi.example/a git https://git.example/a"),
                AnswerRecord(rdtype="CNAME"),
                txt("v=spf1 -all"),
                txt("go-import multi.example/b hg https://hg.example/b"),
            ],
            "empty.example": [txt("v=spf1 -all")],
            "broken.example": DNSError("broken.example", "connection refused"),
        }
    )


@pytest.fixture
async def http_server_factory():
    """Factory for creating aiohttp servers."""
    runners = []

    async def create_server(app):
        runner = web.AppRunner(app, handler_cancellation=True)
        await runner.setup()
        site = web.TCPSite(runner, "127.0.0.1", 0)
        await site.start()

        # Get the actual port from the running server's site info
        site = list(runner.sites)[0]
        port = site._server.sockets[0].getsockname()[1]
        server_url = f"http://127.0.0.1:{port}"
        runners.append(runner)
        return server_url

    yield create_server

    for runner in runners:
        await runner.cleanup()


@pytest.fixture
async def http_client_factory(http_server_factory):
    """Factory for creating HTTPX clients."""
    clients = []

    async def create_client(app):
        base_url = await http_server_factory(app)
        client = httpx.AsyncClient(base_url=base_url, follow_redirects=False)
        clients.append(client)
        return client

    yield create_client

    for client in clients:
        await client.aclose()
