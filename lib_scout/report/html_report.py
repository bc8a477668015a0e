# File: lib_scout/report/html_report.py
"""lib_scout.report.html_report: Генерация HTML-отчёта с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from lib_scout.aggregator import SignalReport

TEMPLATE_NAME = "report.html.j2"
DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


def render_html(
    report: SignalReport,
    template_dir: Union[Path, str, None],
    output_path: Union[Path, str],
) -> Path:
    """Рендерит HTML-отчёт из шаблона и сохраняет его по указанному пути.

    Args:
        report: объект SignalReport.
        template_dir: директория с Jinja2-шаблонами (None — шаблон из пакета).
        output_path: путь к итоговому HTML-файлу.

    Returns:
        Path до сохранённого HTML-файла.
    """
    template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template(TEMPLATE_NAME)

    context: dict[str, Any] = {
        "query": report.query,
        "references": report.references,
        "libraries": report.libraries,
        "pages_fetched": report.pages_fetched,
        "failures": report.failures,
    }

    html_content = template.render(**context)
    output_path.write_text(html_content, encoding="utf-8")

    return output_path
