"""
Fetcher module: downloads every candidate site independently, with a
per-request timeout and optional retry/backoff.
"""
from __future__ import annotations

import asyncio
import random
from contextlib import AsyncExitStack
from typing import Iterable, Optional, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from lib_scout.config import CrawlerConfig
from lib_scout.crawler.models import CandidateURL, FetchFailure, FetchOutcome, PageBatch, PageData
from lib_scout.logger import logger

__all__ = ("RETRY_STATUS", "Fetcher")

RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)


class _RetryableStatus(ClientError):
    def __init__(self, status: int) -> None:
        super().__init__(f"HTTP {status}")
        self.status = status


class Fetcher:
    """Downloads page bodies; one failing URL never affects the others."""

    def __init__(
        self,
        session: ClientSession,
        config: CrawlerConfig,
        retry_status: Sequence[int] = RETRY_STATUS,
    ) -> None:
        self.session = session
        self.config = config
        self._retry_status = retry_status
        self._timeout = ClientTimeout(total=config.fetch_timeout)
        self._limit: Optional[asyncio.Semaphore] = (
            asyncio.Semaphore(config.concurrency) if config.concurrency else None
        )

    async def fetch_pages(self, urls: Iterable[CandidateURL]) -> PageBatch:
        """
        Fetch every URL as its own task and wait for all of them to settle.

        Each outcome goes into the slot keyed by its own URL; slots follow
        the sorted order of *urls*.
        """
        ordered = sorted(set(urls))
        if not ordered:
            return PageBatch()

        tasks = [asyncio.create_task(self.fetch(url)) for url in ordered]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        batch = PageBatch()
        for url, outcome in zip(ordered, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error("Unexpected error fetching %s: %r", url, outcome)
                outcome = FetchFailure(str(url), f"unexpected error: {outcome!r}")
            batch.results[url] = outcome

        logger.info(
            "Fetched %d/%d sites (%d failed)", len(batch.pages), len(batch), len(batch.failures)
        )
        return batch

    async def fetch(self, url: CandidateURL) -> FetchOutcome:
        """
        Fetch a single URL.

        Returns PageData on success, FetchFailure otherwise. Transient
        failures (5xx, 429, transport errors) are retried up to
        ``config.retry_times`` times with exponential backoff.
        """
        target = str(url)
        attempts = 0
        while True:
            try:
                async with AsyncExitStack() as stack:
                    if self._limit is not None:
                        await stack.enter_async_context(self._limit)
                    return await self._get(target)
            except asyncio.TimeoutError:
                # no retry on timeout
                logger.warning("Timeout fetching %s after %.1f s", target, self.config.fetch_timeout)
                return FetchFailure(target, f"timeout after {self.config.fetch_timeout} s")
            except ClientError as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    logger.warning("Failed %s: %s", target, exc)
                    return FetchFailure(target, str(exc) or exc.__class__.__name__)
                base = self.config.retry_backoff
                backoff = min(60.0, base * 2**attempts + base * random.random())
                logger.debug(
                    "Retry %d/%d for %s after %.2f s", attempts, self.config.retry_times, target, backoff
                )
                await asyncio.sleep(backoff)

    async def _get(self, target: str) -> FetchOutcome:
        async with self.session.get(
            target,
            headers={"User-Agent": self.config.user_agent},
            timeout=self._timeout,
            raise_for_status=False,
        ) as resp:
            if resp.status in self._retry_status:
                raise _RetryableStatus(resp.status)
            if resp.status >= 400:
                logger.warning("Failed %s: HTTP %d", target, resp.status)
                return FetchFailure(target, f"HTTP {resp.status}")
            text = await resp.text(errors="replace")
            logger.debug("Fetched %s: %d (%d characters)", target, resp.status, len(text))
            return PageData(target, text)
