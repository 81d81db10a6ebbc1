"""
Counters for the host resolution cache.

Exposed as JSON on the diagnostics endpoint when request tracking is enabled.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class CacheMetrics:
    """Container for host cache counters."""

    hits: int = 0
    misses: int = 0
    stores: int = 0
    dns_errors: int = 0
    not_found: int = 0
    start_time: float = field(default_factory=time.time)

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary for JSON export."""
        return {
            "counters": {
                "hits": self.hits,
                "misses": self.misses,
                "stores": self.stores,
                "dns_errors": self.dns_errors,
                "not_found": self.not_found,
            },
            "rates": {
                "hit_rate_pct": round(self.hit_rate * 100, 2),
            },
            "uptime_sec": round(time.time() - self.start_time, 2),
            "timestamp": time.time(),
        }
