from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True, slots=True)
class ImportDirective:
    """One ``go-import`` mapping: import-path prefix, VCS kind and repository URL."""

    prefix: str
    vcs: str
    url: str

    @property
    def meta_content(self) -> str:
        """Value of the ``content`` attribute of the go-import meta tag."""

        return f"{self.prefix} {self.vcs} {self.url}"

    def to_dict(self) -> Dict[str, str]:
        return {"prefix": self.prefix, "vcs": self.vcs, "url": self.url}


@dataclass(frozen=True, slots=True)
class ResolvedHost:
    """Cached resolution for one hostname.

    ``expiry`` is on the same clock as the owning cache (monotonic seconds by
    default). A stored entry always carries at least one directive.
    """

    imports: Tuple[ImportDirective, ...]
    expiry: float

    def __post_init__(self) -> None:
        if not self.imports:
            raise ValueError("ResolvedHost requires at least one import directive")

    def is_fresh(self, now: float) -> bool:
        return self.expiry > now


@dataclass(frozen=True, slots=True)
class AnswerRecord:
    """A single DNS answer as seen by the cache.

    ``strings`` holds the character strings of a TXT record in wire order and
    is empty for every other record type.
    """

    rdtype: str
    strings: Tuple[str, ...] = ()

    @property
    def is_txt(self) -> bool:
        return self.rdtype == "TXT"
