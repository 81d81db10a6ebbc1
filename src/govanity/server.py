"""aiohttp application serving go-import meta redirects."""

from __future__ import annotations

import asyncio
import logging
import ssl
from typing import List, Optional

from aiohttp import web

from .config import AppSettings, parse_listen_address
from .constants import (
    DEBUG_METRICS_PATH,
    DEBUG_REQUESTS_PATH,
    GO_GET_PARAM,
    HTML_CONTENT_TYPE,
    SERVER_NAME,
)
from .dns_cache import HostCache
from .dns_client import TXTClient
from .errors import DNSError, ResolutionError
from .render import render_meta
from .tracker import RequestTracker

logger = logging.getLogger(__name__)

SETTINGS_KEY = web.AppKey("settings", AppSettings)
HOST_CACHE_KEY = web.AppKey("host_cache", HostCache)


def strip_port(hostport: str) -> str:
    """Return the host part of a ``Host`` header value."""

    if hostport.startswith("["):
        end = hostport.find("]")
        return hostport[1:end] if end != -1 else hostport
    host, sep, port = hostport.rpartition(":")
    if sep and ":" not in host and (not port or port.isdigit()):
        return host
    return hostport


def build_host_cache(settings: AppSettings) -> HostCache:
    client = TXTClient(timeout=settings.DNS_TIMEOUT, single_inflight=settings.SINGLE_INFLIGHT)
    return HostCache(client, resolver=settings.RESOLVER, refresh=settings.REFRESH)


async def handle_import(request: web.Request) -> web.StreamResponse:
    settings = request.app[SETTINGS_KEY]
    host = strip_port(request.host)

    if request.query.get(GO_GET_PARAM) != "1":
        raise web.HTTPFound(f"{settings.DOC_URL}{host}{request.path}")

    cache = request.app[HOST_CACHE_KEY]
    try:
        resolved = await cache.resolve(host)
    except ResolutionError as exc:
        level = logging.WARNING if isinstance(exc, DNSError) else logging.INFO
        logger.log(level, "lookup %r: %s", host, exc)
        raise web.HTTPNotFound()

    return web.Response(
        text=render_meta(resolved.imports), content_type=HTML_CONTENT_TYPE, charset="utf-8"
    )


async def _set_server_header(request: web.Request, response: web.StreamResponse) -> None:
    response.headers["Server"] = SERVER_NAME


def create_app(settings: AppSettings, host_cache: Optional[HostCache] = None) -> web.Application:
    """Build the application; ``host_cache`` defaults to a TCP TXT-backed cache."""

    app = web.Application()
    app[SETTINGS_KEY] = settings
    app[HOST_CACHE_KEY] = host_cache if host_cache is not None else build_host_cache(settings)
    app.on_response_prepare.append(_set_server_header)

    if settings.TRACK_REQUESTS:
        tracker = RequestTracker()
        tracker.setup(app)
        cache = app[HOST_CACHE_KEY]

        async def handle_metrics(request: web.Request) -> web.Response:
            return web.json_response(cache.stats.to_dict())

        app.router.add_get(DEBUG_REQUESTS_PATH, tracker.handle)
        app.router.add_get(DEBUG_METRICS_PATH, handle_metrics)

    app.router.add_route("*", "/{tail:.*}", handle_import)
    return app


def _ssl_context(settings: AppSettings) -> ssl.SSLContext:
    context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
    context.load_cert_chain(settings.TLS_CERT, settings.TLS_KEY)
    return context


async def start_sites(runner: web.AppRunner, settings: AppSettings) -> List[web.TCPSite]:
    sites: List[web.TCPSite] = []
    if settings.HTTPS_ADDR:
        host, port = parse_listen_address(settings.HTTPS_ADDR)
        sites.append(web.TCPSite(runner, host, port, ssl_context=_ssl_context(settings)))
        logger.info("Starting HTTPS server on %s", settings.HTTPS_ADDR)
    if settings.HTTP_ADDR:
        host, port = parse_listen_address(settings.HTTP_ADDR)
        sites.append(web.TCPSite(runner, host, port))
        logger.info("Starting HTTP server on %s", settings.HTTP_ADDR)
    for site in sites:
        await site.start()
    return sites


async def run_server(settings: AppSettings, host_cache: Optional[HostCache] = None) -> None:
    """Serve until cancelled. A disconnected client cancels its handler."""

    app = create_app(settings, host_cache)
    runner = web.AppRunner(app, handler_cancellation=True)
    await runner.setup()
    try:
        await start_sites(runner, settings)
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
