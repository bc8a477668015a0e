"""
Сканер сигналов: внешние скрипты на загруженных страницах.

scan_pages() возвращает реально найденные ссылки на скрипты;
classify_libraries() — необязательное обогащение поверх этого списка.
"""
from __future__ import annotations

from typing import Iterable, List, Mapping, Sequence

from lib_scout.logger import logger
from lib_scout.parser.html_parser import attr, parse_html, select

__all__ = ["script_sources", "scan_pages", "classify_libraries"]


def script_sources(body: str) -> List[str]:
    """Непустые значения src у элементов <script> в порядке документа."""
    tree = parse_html(body)
    return [src for src in (attr(el, "src") for el in select(tree, "script")) if src.strip()]


def scan_pages(bodies: Iterable[str]) -> List[str]:
    """
    Собирает ссылки на скрипты со всех страниц в один плоский список.

    Parameters
    ----------
    bodies : Iterable[str]
        Содержимое страниц в порядке обработки.

    Returns
    -------
    List[str]
        Ссылки: сначала порядок страниц, затем порядок внутри страницы.
    """
    references: List[str] = []
    pages = 0
    for body in bodies:
        pages += 1
        references.extend(script_sources(body))
    logger.info("Found %d script references on %d pages", len(references), pages)
    return references


def classify_libraries(
    references: Iterable[str], known: Mapping[str, Sequence[str]]
) -> List[str]:
    """Сопоставляет ссылки с известными библиотеками по маркерам (без учёта регистра)."""
    libraries: List[str] = []
    for ref in references:
        lowered = ref.lower()
        for name, markers in known.items():
            if name in libraries:
                continue
            if any(marker in lowered for marker in markers):
                libraries.append(name)
    return libraries
