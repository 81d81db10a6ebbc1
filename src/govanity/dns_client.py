"""TXT lookups over TCP with request coalescing."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Protocol, Tuple

import dns.asyncquery
import dns.exception
import dns.inet
import dns.message
import dns.name
import dns.rcode
import dns.rdatatype

from .constants import DEFAULT_DNS_PORT, DEFAULT_DNS_TIMEOUT
from .errors import ConfigError, DNSError
from .models import AnswerRecord

logger = logging.getLogger(__name__)


class TXTExchanger(Protocol):
    async def exchange(self, name: str, resolver: str) -> List[AnswerRecord]: ...


def parse_resolver_address(address: str) -> Tuple[str, int]:
    """Split a resolver address into host and port.

    Accepts ``addr``, ``addr:port`` and ``[v6addr]:port``; the port defaults
    to 53. The host part must be a literal IPv4 or IPv6 address, since the
    resolver is what turns names into addresses in the first place.
    """
    address = address.strip()
    if not address:
        raise ConfigError("resolver address is empty")

    if address.startswith("["):
        end = address.find("]")
        if end == -1:
            raise ConfigError(f"invalid resolver address {address!r}")
        host, rest = address[1:end], address[end + 1 :]
        if rest and not rest.startswith(":"):
            raise ConfigError(f"invalid resolver address {address!r}")
        port = rest[1:]
    elif address.count(":") == 1:
        host, port = address.split(":")
    else:
        # bare IPv4 or unbracketed IPv6
        host, port = address, ""

    if not host:
        raise ConfigError(f"resolver address {address!r} has no host")
    if not dns.inet.is_address(host):
        raise ConfigError(f"resolver {address!r} must be an IP address")
    if not port:
        return host, DEFAULT_DNS_PORT
    if not port.isdigit() or not 0 < int(port) <= 65535:
        raise ConfigError(f"invalid resolver port in {address!r}")
    return host, int(port)


def _to_answers(response: dns.message.Message) -> List[AnswerRecord]:
    answers: List[AnswerRecord] = []
    for rrset in response.answer:
        rdtype = dns.rdatatype.to_text(rrset.rdtype)
        for rdata in rrset:
            if rrset.rdtype == dns.rdatatype.TXT:
                strings = tuple(s.decode("utf-8", errors="replace") for s in rdata.strings)
                answers.append(AnswerRecord(rdtype=rdtype, strings=strings))
            else:
                answers.append(AnswerRecord(rdtype=rdtype))
    return answers


@dataclass
class _Flight:
    task: "asyncio.Task[List[AnswerRecord]]"
    waiters: int = 0


class TXTClient:
    """Resolve TXT records against one resolver over TCP.

    With ``single_inflight`` enabled, concurrent exchanges for the same name and
    resolver share a single query. Each caller may be cancelled independently;
    the shared query is cancelled once its last caller goes away.
    """

    def __init__(self, timeout: float = DEFAULT_DNS_TIMEOUT, single_inflight: bool = True) -> None:
        self.timeout = timeout
        self.single_inflight = single_inflight
        self._inflight: Dict[Tuple[str, str], _Flight] = {}

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    async def exchange(self, name: str, resolver: str) -> List[AnswerRecord]:
        if not self.single_inflight:
            return await self._exchange(name, resolver)

        key = (name, resolver)
        flight = self._inflight.get(key)
        if flight is None:
            flight = _Flight(task=asyncio.create_task(self._exchange(name, resolver)))
            self._inflight[key] = flight
            flight.task.add_done_callback(lambda _task: self._forget(key, flight))
        else:
            logger.debug("Joining in-flight TXT query for %s", name)

        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        finally:
            flight.waiters -= 1
            if flight.waiters == 0 and not flight.task.done():
                logger.debug("Abandoning TXT query for %s, no callers left", name)
                self._forget(key, flight)
                flight.task.cancel()

    def _forget(self, key: Tuple[str, str], flight: _Flight) -> None:
        if self._inflight.get(key) is flight:
            del self._inflight[key]

    async def _exchange(self, name: str, resolver: str) -> List[AnswerRecord]:
        host, port = parse_resolver_address(resolver)
        try:
            query = dns.message.make_query(dns.name.from_text(name), dns.rdatatype.TXT)
            response = await dns.asyncquery.tcp(query, host, timeout=self.timeout, port=port)
        except (dns.exception.DNSException, OSError, EOFError, asyncio.TimeoutError) as exc:
            raise DNSError(name, exc) from exc

        rcode = response.rcode()
        if rcode not in (dns.rcode.NOERROR, dns.rcode.NXDOMAIN):
            raise DNSError(name, f"resolver {resolver} answered {dns.rcode.to_text(rcode)}")
        return _to_answers(response)
