"""In-flight request diagnostics."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List

from aiohttp import web


@dataclass
class TrackedRequest:
    start: float
    remote: str
    method: str
    path: str
    user_agent: str
    bytes_written: int = 0


class RequestTracker:
    """Record requests while their handler runs and list them on demand.

    A request stays listed until its response has been sent, so the bytes
    column counts the body written so far. Streamed bodies are counted per
    ``write``; a plain :class:`~aiohttp.web.Response` is counted in full
    when its headers go out.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._requests: Dict[int, TrackedRequest] = {}

    def __len__(self) -> int:
        return len(self._requests)

    def setup(self, app: web.Application) -> None:
        app.middlewares.append(self.middleware)
        app.on_response_prepare.append(self._count_body)

    def snapshot(self) -> List[TrackedRequest]:
        return sorted(self._requests.values(), key=lambda r: r.start)

    @web.middleware
    async def middleware(
        self,
        request: web.Request,
        handler: Callable[[web.Request], Awaitable[web.StreamResponse]],
    ) -> web.StreamResponse:
        key = id(request)
        self._requests[key] = TrackedRequest(
            start=self._clock(),
            remote=request.remote or "",
            method=request.method,
            path=request.path_qs,
            user_agent=request.headers.get("User-Agent", ""),
        )
        try:
            response = await handler(request)
            # Both calls are no-ops for a response the handler already finished.
            await response.prepare(request)
            await response.write_eof()
            return response
        finally:
            del self._requests[key]

    async def _count_body(self, request: web.Request, response: web.StreamResponse) -> None:
        tracked = self._requests.get(id(request))
        if tracked is None:
            return
        if isinstance(response, web.Response):
            tracked.bytes_written = response.content_length or 0
            return

        write = response.write

        async def counting_write(data: bytes) -> None:
            await write(data)
            tracked.bytes_written += len(data)

        response.write = counting_write  # type: ignore[method-assign]

    def render(self) -> str:
        now = self._clock()
        rows = [
            (
                f"{now - r.start:.3f}s",
                f"{r.bytes_written} bytes",
                r.remote,
                f"{r.method} {r.path}",
                repr(r.user_agent),
            )
            for r in self.snapshot()
        ]
        if not rows:
            return ""
        widths = [max(len(row[i]) for row in rows) for i in range(4)]
        lines = [
            " ".join(col.ljust(width) for col, width in zip(row[:4], widths)) + " " + row[4]
            for row in rows
        ]
        return "\n".join(lines) + "\n"

    async def handle(self, request: web.Request) -> web.Response:
        return web.Response(text=self.render(), content_type="text/plain", charset="utf-8")
