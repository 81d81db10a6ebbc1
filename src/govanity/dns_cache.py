"""TTL-bounded cache mapping hostnames to their go-import directives."""

from __future__ import annotations

import asyncio
import logging
from time import monotonic
from typing import Callable, Dict, Optional

from .constants import DEFAULT_REFRESH, DEFAULT_RESOLVER
from .dns_client import TXTExchanger, parse_resolver_address
from .errors import DNSError, NotFound
from .metrics import CacheMetrics
from .models import ResolvedHost
from .parsers import extract_imports

logger = logging.getLogger(__name__)


def normalise_hostname(hostname: str) -> str:
    hostname = hostname.strip().lower()
    if hostname.endswith("."):
        hostname = hostname[:-1]
    return hostname


class HostCache:
    """Resolve vanity hostnames through DNS TXT records, caching successes.

    Only successful resolutions are stored. A lookup that fails or finds no
    go-import records leaves the cache untouched, so the next request for the
    same host queries DNS again. Entries are never evicted.

    :meth:`match` has no suspension point, which makes it atomic with respect
    to every other task on the event loop. Stores take ``_lock`` around the
    map assignment only; the DNS exchange runs outside of it.
    """

    def __init__(
        self,
        client: TXTExchanger,
        resolver: str = DEFAULT_RESOLVER,
        refresh: float = DEFAULT_REFRESH,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        parse_resolver_address(resolver)
        self._client = client
        self.resolver = resolver
        self.refresh = refresh
        self._clock = clock
        self._hosts: Dict[str, ResolvedHost] = {}
        self._lock = asyncio.Lock()
        self.stats = CacheMetrics()

    def __len__(self) -> int:
        return len(self._hosts)

    def __contains__(self, hostname: object) -> bool:
        return isinstance(hostname, str) and normalise_hostname(hostname) in self._hosts

    def match(self, hostname: str) -> Optional[ResolvedHost]:
        """Return the cached entry for ``hostname`` if it has not expired."""

        cached = self._hosts.get(normalise_hostname(hostname))
        if cached is not None and cached.is_fresh(self._clock()):
            return cached
        return None

    async def lookup(self, hostname: str) -> ResolvedHost:
        """Query DNS for ``hostname`` and store the result on success.

        Raises:
            DNSError: the exchange with the resolver failed.
            NotFound: the exchange succeeded but carried no go-import records.
        """
        name = normalise_hostname(hostname)
        try:
            answers = await self._client.exchange(name, self.resolver)
        except DNSError:
            self.stats.dns_errors += 1
            raise
        except (OSError, EOFError, asyncio.TimeoutError) as exc:
            self.stats.dns_errors += 1
            raise DNSError(name, exc) from exc

        imports = extract_imports(answers)
        if not imports:
            self.stats.not_found += 1
            raise NotFound(name, "no go-import TXT records found")

        resolved = ResolvedHost(imports=tuple(imports), expiry=self._clock() + self.refresh)
        async with self._lock:
            self._hosts[name] = resolved
        self.stats.stores += 1
        logger.debug("Cached %d go-import directive(s) for %s", len(imports), name)
        return resolved

    async def resolve(self, hostname: str) -> ResolvedHost:
        cached = self.match(hostname)
        if cached is not None:
            self.stats.hits += 1
            return cached
        self.stats.misses += 1
        return await self.lookup(hostname)
