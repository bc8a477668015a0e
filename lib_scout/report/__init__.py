"""lib_scout.report: Генерация отчётов (JSON и HTML) для CLI и тестов."""

from lib_scout.report.html_report import render_html
from lib_scout.report.json_report import render_json

__all__ = ["render_json", "render_html"]
