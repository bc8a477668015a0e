"""
Search stage: one request to the search engine, parsed into a ResultsDocument.
"""
from __future__ import annotations

import asyncio

from aiohttp import ClientError, ClientSession, ClientTimeout

from lib_scout.config import CrawlerConfig
from lib_scout.crawler.models import ResultsDocument
from lib_scout.logger import logger
from lib_scout.parser.html_parser import parse_html

__all__ = ("SearchError", "search", "parse_results")


class SearchError(RuntimeError):
    """The search request failed; the run cannot produce a report."""


def parse_results(raw: str, url: str = "") -> ResultsDocument:
    """Wrap raw results markup into a ResultsDocument."""
    return ResultsDocument(url=url, raw=raw, tree=parse_html(raw))


async def search(session: ClientSession, config: CrawlerConfig, query: str) -> ResultsDocument:
    """
    Query the search engine for *query*.

    Raises SearchError on transport error, timeout or a non-2xx status.
    """
    params = {"q": query, "num": str(config.result_count)}
    search_url = str(config.search_url)
    logger.info("Sending search request: %s q=%r num=%s", search_url, query, config.result_count)
    try:
        async with session.get(
            search_url,
            params=params,
            headers={"User-Agent": config.user_agent},
            timeout=ClientTimeout(total=config.search_timeout),
        ) as resp:
            if not 200 <= resp.status < 300:
                raise SearchError(f"search returned HTTP {resp.status} for {resp.url}")
            text = await resp.text(errors="replace")
            final_url = str(resp.url)
    except asyncio.TimeoutError as exc:
        raise SearchError(f"search timed out after {config.search_timeout} s") from exc
    except ClientError as exc:
        raise SearchError(f"search request failed: {exc}") from exc
    logger.debug("Search response: %d characters", len(text))
    return await asyncio.to_thread(parse_results, text, final_url)
