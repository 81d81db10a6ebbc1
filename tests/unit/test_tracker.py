import asyncio
from types import SimpleNamespace

import pytest
from aiohttp import web

from govanity.tracker import RequestTracker, TrackedRequest

from conftest import FakeClock


def fake_request(path="/foo?go-get=1", agent="Go-http-client/1.1"):
    return SimpleNamespace(
        remote="192.0.2.1",
        method="GET",
        path_qs=path,
        headers={"User-Agent": agent},
    )


def tracked(start, path, agent="Go-http-client/1.1", bytes_written=0):
    return TrackedRequest(
        start=start,
        remote="192.0.2.1",
        method="GET",
        path=path,
        user_agent=agent,
        bytes_written=bytes_written,
    )


async def test_middleware_forgets_request_on_error():
    tracker = RequestTracker()
    seen = []

    async def handler(request):
        seen.append(len(tracker))
        raise web.HTTPNotFound()

    with pytest.raises(web.HTTPNotFound):
        await tracker.middleware(fake_request(), handler)
    assert seen == [1]
    assert len(tracker) == 0


def test_render_line_format():
    tracker = RequestTracker(clock=FakeClock(101.5))
    tracker._requests[1] = tracked(100.0, "/foo?go-get=1")

    assert tracker.render() == "1.500s 0 bytes 192.0.2.1 GET /foo?go-get=1 'Go-http-client/1.1'\n"


def test_render_orders_oldest_first_and_aligns_columns():
    tracker = RequestTracker(clock=FakeClock(12.0))
    tracker._requests[1] = tracked(2.0, "/b", agent="curl", bytes_written=7)
    tracker._requests[2] = tracked(0.0, "/a/long/path", bytes_written=12345)

    lines = tracker.render().splitlines()
    assert lines[0].startswith("12.000s 12345 bytes")
    assert "/a/long/path" in lines[0]
    assert lines[1].startswith("10.000s 7 bytes")
    assert lines[0].index("192.0.2.1") == lines[1].index("192.0.2.1")
    assert lines[0].index("GET") == lines[1].index("GET")
    assert lines[0].index("'") == lines[1].index("'")


def test_render_empty():
    assert RequestTracker().render() == ""


async def test_streamed_bytes_are_counted_while_in_flight(http_client_factory):
    tracker = RequestTracker()
    app = web.Application()
    tracker.setup(app)
    written = asyncio.Event()
    release = asyncio.Event()

    async def stream(request):
        response = web.StreamResponse()
        await response.prepare(request)
        await response.write(b"x" * 10)
        await response.write(b"y" * 5)
        written.set()
        await release.wait()
        return response

    app.router.add_get("/stream", stream)
    app.router.add_get("/debug/requests", tracker.handle)
    client = await http_client_factory(app)

    pending = asyncio.create_task(client.get("/stream", headers={"User-Agent": "curl"}))
    await asyncio.wait_for(written.wait(), timeout=5)

    in_flight = {r.path: r for r in tracker.snapshot()}
    assert in_flight["/stream"].bytes_written == 15

    page = await client.get("/debug/requests")
    line = next(line for line in page.text.splitlines() if "GET /stream" in line)
    assert "15 bytes" in line

    release.set()
    response = await asyncio.wait_for(pending, timeout=5)
    assert response.content == b"x" * 10 + b"y" * 5
    assert len(tracker) == 0


async def test_response_body_is_counted_before_request_is_forgotten(http_client_factory):
    tracker = RequestTracker()
    app = web.Application()
    tracker.setup(app)
    seen = []

    async def record(request, response):
        seen.extend(r.bytes_written for r in tracker.snapshot())

    # Runs after the tracker's own prepare hook.
    app.on_response_prepare.append(record)

    async def hello(request):
        return web.Response(text="hello, world")

    app.router.add_get("/hello", hello)
    client = await http_client_factory(app)

    response = await client.get("/hello")
    assert response.text == "hello, world"
    assert seen == [len("hello, world")]
    assert len(tracker) == 0
