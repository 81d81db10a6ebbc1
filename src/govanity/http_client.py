"""Client side of the go-get protocol, used to check a deployment."""

from __future__ import annotations

import re
from contextlib import asynccontextmanager
from html import unescape
from typing import AsyncIterator, List, Optional

import httpx

from .constants import GO_GET_PARAM, SERVER_NAME
from .models import ImportDirective

DEFAULT_TIMEOUT = httpx.Timeout(20.0, connect=10.0, read=15.0)

_META_RE = re.compile(
    r"""<meta\s+name=["']go-import["']\s+content=["']([^"']*)["']\s*/?>""", re.IGNORECASE
)


@asynccontextmanager
async def get_client(timeout: httpx.Timeout = DEFAULT_TIMEOUT) -> AsyncIterator[httpx.AsyncClient]:
    """Yield an AsyncClient that does not follow redirects.

    A vanity server answers go-get requests directly; a redirect means the
    request did not reach the go-get handler.
    """
    async with httpx.AsyncClient(
        timeout=timeout,
        headers={"accept": "text/html", "user-agent": f"{SERVER_NAME}-check/1"},
        follow_redirects=False,
    ) as client:
        yield client


def parse_meta_imports(body: str) -> List[ImportDirective]:
    """Extract go-import meta tags from an HTML body, in document order."""

    imports: List[ImportDirective] = []
    for match in _META_RE.finditer(body):
        fields = unescape(match.group(1)).split()
        if len(fields) == 3:
            imports.append(ImportDirective(*fields))
    return imports


def build_check_request(import_path: str, server: Optional[str] = None) -> httpx.Request:
    """Build the go-get request ``go get`` would send for ``import_path``.

    With ``server`` set, the request goes to that base URL instead and the
    vanity host is carried in the ``Host`` header.
    """
    import_path = import_path.strip().strip("/")
    host, _, path = import_path.partition("/")
    params = {GO_GET_PARAM: "1"}
    if server is None:
        return httpx.Request("GET", f"https://{host}/{path}", params=params)
    return httpx.Request(
        "GET", f"{server.rstrip('/')}/{path}", params=params, headers={"Host": host}
    )


async def fetch_meta_imports(
    import_path: str,
    server: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[ImportDirective]:
    """Fetch ``import_path`` with ``go-get=1`` and return the advertised directives.

    Raises:
        httpx.HTTPStatusError: the server did not answer 200.
        httpx.HTTPError: transport failure.
    """
    request = build_check_request(import_path, server)
    if client is None:
        async with get_client() as owned:
            response = await owned.send(request)
    else:
        response = await client.send(request)
    if response.status_code != 200:
        response.raise_for_status()
        raise httpx.HTTPStatusError(
            f"unexpected status {response.status_code} for {request.url}",
            request=request,
            response=response,
        )
    return parse_meta_imports(response.text)
