"""
Candidate URL extraction from a search results page.
"""
from __future__ import annotations

import re
from typing import Optional, Set

from lib_scout.crawler.models import CandidateURL, ResultsDocument
from lib_scout.logger import logger
from lib_scout.parser.html_parser import attr, select

__all__ = ("DOMAIN_NAME_RE", "REDIRECT_PREFIX", "extract_links", "find_domains")

DOMAIN_NAME_RE = re.compile(r"([a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,6}")
REDIRECT_PREFIX = "/url?q="


def find_domains(value: str) -> list[str]:
    """Return every non-overlapping domain-like match in *value*, lower-cased."""
    return [m.group(0).lower().strip() for m in DOMAIN_NAME_RE.finditer(value)]


def extract_links(
    doc: ResultsDocument,
    *,
    prefix: str = REDIRECT_PREFIX,
    scheme: str = "http",
    port: Optional[int] = None,
) -> Set[CandidateURL]:
    """
    Collect destination sites from the redirect anchors of a results page.

    The redirect href embeds the destination inside a query string, so the
    host is recovered with a domain pattern rather than by URL parsing. A
    match that cannot be turned into a CandidateURL is logged and skipped.
    """
    found: Set[CandidateURL] = set()
    for tag in select(doc.tree, "a[href]"):
        href = attr(tag, "href")
        if not href.startswith(prefix):
            continue
        for host in find_domains(href):
            try:
                url = CandidateURL.build(host, scheme=scheme, port=port)
            except ValueError as exc:
                logger.warning("Skipping malformed host %r: %s", host[:80], exc)
                continue
            if url not in found:
                logger.debug("Candidate site: %s", url)
            found.add(url)
    logger.info("Extracted %d candidate sites from %s", len(found), doc.url or "<document>")
    return found
