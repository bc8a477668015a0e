"""lib_scout.aggregator: Сборка итогового отчёта (SignalReport) по результатам прогона."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

from lib_scout.crawler.models import PageBatch
from lib_scout.scanner import classify_libraries


@dataclass(slots=True)
class SignalReport:
    """Результат прогона: ссылки на скрипты, найденные библиотеки и сбои загрузки."""

    query: str
    references: List[str] = field(default_factory=list)
    libraries: List[str] = field(default_factory=list)
    pages_fetched: int = 0
    failures: Dict[str, str] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(self.as_dict(), ensure_ascii=False, indent=2 if pretty else None)


def aggregate_report(
    query: str,
    references: Sequence[str],
    batch: PageBatch,
    known_libraries: Mapping[str, Sequence[str]] | None = None,
) -> SignalReport:
    """Собирает SignalReport; классификация библиотек выполняется, только если передан справочник."""
    refs = list(references)
    return SignalReport(
        query=query,
        references=refs,
        libraries=classify_libraries(refs, known_libraries) if known_libraries else [],
        pages_fetched=len(batch.pages),
        failures={f.url: f.reason for f in batch.failures},
    )


__all__ = ["SignalReport", "aggregate_report"]
