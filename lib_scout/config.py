"""
Модуль для загрузки и валидации конфигурации краулера LibScout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    field_validator,
)

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"

# Название библиотеки -> маркеры, которые ищутся в src скриптов (нижний регистр).
DEFAULT_KNOWN_LIBRARIES: Dict[str, List[str]] = {
    "React": ["react"],
    "Angular": ["angular"],
    "Vue.js": ["vue.js", "vue.min.js", "/vue@", "/vue/"],
    "jQuery": ["jquery"],
    "Material UI": ["material-ui", "@mui/"],
    "Bootstrap": ["bootstrap"],
    "Lodash": ["lodash"],
    "Moment.js": ["moment.js", "moment.min.js", "/moment@"],
    "D3.js": ["d3.js", "d3.min.js", "/d3@"],
    "Google Analytics": ["google-analytics.com", "googletagmanager.com"],
}


class CrawlerConfig(BaseModel):
    """Конфигурация одного прогона конвейера: поиск → ссылки → загрузка → анализ."""
    model_config = ConfigDict(extra="forbid", frozen=True, validate_default=True)

    search_url: HttpUrl = Field(
        "https://www.google.com/search", description="Адрес поисковой системы."
    )
    result_count: int = Field(50000, ge=1, description="Желаемое число результатов (параметр num).")
    redirect_prefix: str = Field(
        "/url?q=", min_length=1, description="Префикс redirect-ссылок на странице выдачи."
    )
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    search_timeout: float = Field(100.0, gt=0, description="Таймаут поискового запроса (секунд).")
    fetch_timeout: float = Field(10.0, gt=0, description="Таймаут загрузки одной страницы (секунд).")
    retry_times: int = Field(0, ge=0, description="Число повторов загрузки при временных ошибках.")
    retry_backoff: float = Field(
        1.0, ge=0, description="Базовая пауза экспоненциального backoff (секунд)."
    )
    concurrency: Optional[int] = Field(
        None, ge=1, description="Лимит одновременных загрузок (None — без лимита)."
    )
    target_scheme: Literal["http", "https"] = Field("http", description="Схема для найденных сайтов.")
    target_port: Optional[int] = Field(
        None, ge=1, le=65535, description="Порт для найденных сайтов (None — порт схемы)."
    )
    known_libraries: Dict[str, List[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_KNOWN_LIBRARIES.items()},
        description="Известные библиотеки и их маркеры.",
    )

    @field_validator("known_libraries", mode="after")
    @classmethod
    def _lower_markers(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        return {name: [m.strip().lower() for m in markers if m.strip()] for name, markers in v.items()}


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None) -> CrawlerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlerConfig.

    Без явного пути используется configs/default.yaml, а если его нет —
    значения по умолчанию. Явно указанный, но отсутствующий файл даёт
    FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return CrawlerConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return CrawlerConfig(**data)


__all__ = ["CrawlerConfig", "load_config", "DEFAULT_KNOWN_LIBRARIES"]
