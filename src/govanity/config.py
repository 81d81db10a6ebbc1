import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Optional, Tuple

from .constants import (
    DEFAULT_DOC_URL,
    DEFAULT_HTTP_ADDR,
    DEFAULT_REFRESH,
    DEFAULT_RESOLVER,
    DEFAULT_DNS_TIMEOUT,
)
from .dns_client import parse_resolver_address
from .errors import ConfigError


def _env(name: str, default: str) -> Any:
    return field(default_factory=lambda: os.getenv(name, default))


def _env_float(name: str, default: float) -> Any:
    return field(default_factory=lambda: float(os.getenv(name, str(default))))


def _env_bool(name: str, default: bool) -> Any:
    return field(default_factory=lambda: os.getenv(name, str(default)).lower() == "true")


@dataclass
class AppSettings:
    """Centralized configuration for the vanity server.

    Values are read from the environment when the settings object is created;
    CLI flags are layered on top with :meth:`with_overrides`.
    """

    # Listeners
    HTTP_ADDR: str = _env("VANITY_HTTP_ADDR", DEFAULT_HTTP_ADDR)
    HTTPS_ADDR: str = _env("VANITY_HTTPS_ADDR", "")
    TLS_CERT: str = _env("VANITY_TLS_CERT", "")
    TLS_KEY: str = _env("VANITY_TLS_KEY", "")

    # Resolution
    RESOLVER: str = _env("VANITY_RESOLVER", DEFAULT_RESOLVER)
    REFRESH: float = _env_float("VANITY_REFRESH", DEFAULT_REFRESH)  # seconds
    DNS_TIMEOUT: float = _env_float("VANITY_DNS_TIMEOUT", DEFAULT_DNS_TIMEOUT)  # seconds
    SINGLE_INFLIGHT: bool = _env_bool("VANITY_SINGLE_INFLIGHT", True)

    # Requests without go-get=1 are redirected here
    DOC_URL: str = _env("VANITY_DOC_URL", DEFAULT_DOC_URL)

    # Diagnostics
    TRACK_REQUESTS: bool = _env_bool("VANITY_TRACK_REQUESTS", False)

    def __post_init__(self) -> None:
        if self.REFRESH <= 0:
            raise ConfigError(f"refresh period must be positive, got {self.REFRESH}")
        if self.DNS_TIMEOUT <= 0:
            raise ConfigError(f"DNS timeout must be positive, got {self.DNS_TIMEOUT}")
        parse_resolver_address(self.RESOLVER)
        if self.HTTPS_ADDR and not (self.TLS_CERT and self.TLS_KEY):
            raise ConfigError("HTTPS listener requires both a TLS certificate and key")
        if not self.HTTP_ADDR and not self.HTTPS_ADDR:
            raise ConfigError("at least one of the HTTP or HTTPS listen addresses is required")

    def with_overrides(self, **overrides: Optional[Any]) -> "AppSettings":
        """Return a copy with every non-``None`` override applied."""

        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"unknown settings: {', '.join(sorted(unknown))}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def parse_listen_address(address: str) -> Tuple[Optional[str], int]:
    """Split ``host:port`` for a listener; an empty host binds all interfaces."""

    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ConfigError(f"invalid listen address {address!r}, expected host:port")
    port_number = int(port)
    if not 0 <= port_number <= 65535:
        raise ConfigError(f"listen port out of range in {address!r}")
    host = host.strip("[]")
    return (host or None), port_number
