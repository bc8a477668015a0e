# File: lib_scout/engine.py
"""lib_scout.engine: Оркестратор конвейера Поиск → Ссылки → Загрузка → Анализ."""

from __future__ import annotations

import asyncio
import time
from enum import Enum
from typing import List, Optional, Set

from aiohttp import ClientSession

from lib_scout.aggregator import SignalReport, aggregate_report
from lib_scout.config import CrawlerConfig
from lib_scout.crawler.fetcher import Fetcher
from lib_scout.crawler.link_extractor import extract_links
from lib_scout.crawler.models import CandidateURL, PageBatch, ResultsDocument
from lib_scout.crawler.search import SearchError, search
from lib_scout.logger import logger
from lib_scout.scanner import scan_pages

__all__ = ["Stage", "CrawlPipeline", "start_scan"]


class Stage(str, Enum):
    """Состояния конвейера; FAILED достижим только из SEARCHING."""

    PENDING = "pending"
    SEARCHING = "searching"
    EXTRACTING = "extracting"
    FETCHING = "fetching"
    SCANNING = "scanning"
    DONE = "done"
    FAILED = "failed"


class CrawlPipeline:
    """
    Один запрос → один отчёт.

    Этапы выполняются строго последовательно: следующий стартует только
    после того, как задача предыдущего полностью завершилась. Ошибка
    поиска прерывает прогон (SearchError), сбои отдельных сайтов —
    нет, они попадают в отчёт как failures.
    """

    def __init__(self, config: CrawlerConfig, session: Optional[ClientSession] = None) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None
        self.stage = Stage.PENDING

    async def __aenter__(self) -> CrawlPipeline:
        if self.session is None:
            self.session = ClientSession(headers={"User-Agent": self.config.user_agent})
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def run(self, query: str) -> SignalReport:
        """Выполняет все этапы и возвращает SignalReport; при ошибке поиска бросает SearchError."""
        if not query or not query.strip():
            raise ValueError("query must not be blank")
        if self.session is None:
            raise RuntimeError("Session not initialized")

        start = time.monotonic()
        doc = await self._searching(query)
        urls = await self._extracting(doc)
        batch = await self._fetching(urls)
        references = await self._scanning(batch)

        report = aggregate_report(query, references, batch, self.config.known_libraries)
        self._enter(Stage.DONE)
        logger.info(
            "Crawl for %r finished in %.2f s: %d references, %d libraries, %d failed sites",
            query,
            time.monotonic() - start,
            len(report.references),
            len(report.libraries),
            len(report.failures),
        )
        return report

    def _enter(self, stage: Stage) -> None:
        logger.debug("Stage %s -> %s", self.stage.value, stage.value)
        self.stage = stage

    async def _searching(self, query: str) -> ResultsDocument:
        self._enter(Stage.SEARCHING)
        task = asyncio.create_task(search(self.session, self.config, query))
        try:
            return await task
        except SearchError as exc:
            self._enter(Stage.FAILED)
            logger.error("Search failed for %r: %s", query, exc)
            raise

    async def _extracting(self, doc: ResultsDocument) -> Set[CandidateURL]:
        self._enter(Stage.EXTRACTING)
        return await asyncio.to_thread(
            extract_links,
            doc,
            prefix=self.config.redirect_prefix,
            scheme=self.config.target_scheme,
            port=self.config.target_port,
        )

    async def _fetching(self, urls: Set[CandidateURL]) -> PageBatch:
        self._enter(Stage.FETCHING)
        fetcher = Fetcher(self.session, self.config)
        return await asyncio.create_task(fetcher.fetch_pages(urls))

    async def _scanning(self, batch: PageBatch) -> List[str]:
        self._enter(Stage.SCANNING)
        return await asyncio.to_thread(scan_pages, batch.bodies())


async def start_scan(config: CrawlerConfig, query: str) -> SignalReport:
    """Запускает конвейер в собственной HTTP-сессии и возвращает отчёт."""
    async with CrawlPipeline(config) as pipeline:
        return await pipeline.run(query)
