"""Error taxonomy for host resolution."""

from __future__ import annotations

from typing import Optional


class VanityError(Exception):
    """Base exception for govanity."""


class ConfigError(VanityError):
    """Invalid configuration value (listen or resolver address, durations)."""


class ResolutionError(VanityError):
    """A hostname could not be resolved to any go-import directives.

    ``kind`` distinguishes the failure in logs; the HTTP layer treats every
    subclass the same way.
    """

    kind = "resolution"

    def __init__(self, hostname: str, cause: Optional[object] = None):
        self.hostname = hostname
        self.cause = cause
        super().__init__(str(cause) if cause is not None else self.kind)


class DNSError(ResolutionError):
    """The TXT exchange with the resolver failed (timeout, refused, bad reply)."""

    kind = "dns_error"


class NotFound(ResolutionError):
    """The exchange succeeded but yielded no valid go-import records."""

    kind = "not_found"
