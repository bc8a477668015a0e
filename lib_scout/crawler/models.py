"""
Data models for the LibScout crawl pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Union

from bs4 import BeautifulSoup

__all__ = (
    "DEFAULT_PORTS",
    "CandidateURL",
    "ResultsDocument",
    "PageData",
    "FetchFailure",
    "FetchOutcome",
    "PageBatch",
)

DEFAULT_PORTS: Dict[str, int] = {"http": 80, "https": 443}

_MAX_HOST_LEN = 253
_MAX_LABEL_LEN = 63


@dataclass(frozen=True, slots=True, order=True)
class CandidateURL:
    """Normalized site URL discovered on a results page.

    Equality and hashing go through the normalized fields, so two hosts that
    differ only in case or surrounding whitespace collapse to one entry.
    Use :meth:`build` rather than the constructor.
    """

    scheme: str
    host: str
    port: int

    @classmethod
    def build(cls, host: str, scheme: str = "http", port: int | None = None) -> CandidateURL:
        """Normalize and validate; raises ``ValueError`` on a malformed host."""
        scheme = scheme.strip().lower()
        if scheme not in DEFAULT_PORTS:
            raise ValueError(f"unsupported scheme {scheme!r}")
        host = host.strip().lower().rstrip(".")
        if not host:
            raise ValueError("empty host")
        if len(host) > _MAX_HOST_LEN:
            raise ValueError(f"host is longer than {_MAX_HOST_LEN} characters: {host[:40]}...")
        for label in host.split("."):
            if not label or len(label) > _MAX_LABEL_LEN:
                raise ValueError(f"invalid label {label!r} in host {host!r}")
            if label.startswith("-") or label.endswith("-"):
                raise ValueError(f"invalid label {label!r} in host {host!r}")
        if port is None:
            port = DEFAULT_PORTS[scheme]
        if not 0 < port < 65536:
            raise ValueError(f"port out of range: {port}")
        return cls(scheme=scheme, host=host, port=port)

    @property
    def is_default_port(self) -> bool:
        return DEFAULT_PORTS[self.scheme] == self.port

    def __str__(self) -> str:
        if self.is_default_port:
            return f"{self.scheme}://{self.host}"
        return f"{self.scheme}://{self.host}:{self.port}"


@dataclass(slots=True)
class ResultsDocument:
    """Search results page: where it came from, raw markup and parsed tree."""

    url: str
    raw: str
    tree: BeautifulSoup


@dataclass(slots=True)
class PageData:
    """Holds the URL and raw text content of a fetched page."""

    url: str
    content: str


@dataclass(slots=True)
class FetchFailure:
    """A URL that could not be fetched and why."""

    url: str
    reason: str


FetchOutcome = Union[PageData, FetchFailure]


@dataclass(slots=True)
class PageBatch:
    """One slot per requested URL, each holding a page or a failure."""

    results: Dict[CandidateURL, FetchOutcome] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[CandidateURL]:
        return iter(self.results)

    def __getitem__(self, url: CandidateURL) -> FetchOutcome:
        return self.results[url]

    @property
    def pages(self) -> List[PageData]:
        return [o for o in self.results.values() if isinstance(o, PageData)]

    @property
    def failures(self) -> List[FetchFailure]:
        return [o for o in self.results.values() if isinstance(o, FetchFailure)]

    def bodies(self) -> List[str]:
        """Page contents in slot order, failures left out."""
        return [page.content for page in self.pages]
