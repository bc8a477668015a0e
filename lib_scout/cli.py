#!/usr/bin/env python3
"""
Точка входа для запуска краулера LibScout через командную строку.

Команды:
  scan QUERY  Выполнить поиск, загрузить найденные сайты и вывести/сохранить отчёт
  config      Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования (e.g. "%(asctime)s %(levelname)s %(message)s")

Команда scan опции:
  --json PATH         Сохранить JSON-отчёт в файл
  --html PATH         Сохранить HTML-отчёт в файл
  --template DIR      Папка с Jinja2-шаблонами (по умолчанию шаблон из пакета)
  --pretty            Преформатировать JSON-вывод (отступ 2)
  --scan-timeout SEC  Таймаут всего прогона (секунд)

Дополнительно:
  --version, -v       Показать версию LibScout

Пример:
  lib_scout --config configs/default.yaml scan "web frameworks" --json report.json --pretty
"""
import asyncio
import sys
from pathlib import Path

import click

from lib_scout import __version__
from lib_scout.config import load_config
from lib_scout.crawler.search import SearchError
from lib_scout.engine import start_scan
from lib_scout.logger import DEFAULT_FORMAT, init_logging
from lib_scout.report.html_report import render_html
from lib_scout.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='LibScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд LibScout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('scan', context_settings=CONTEXT_SETTINGS)
@click.argument('query')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблонами'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.option(
    '--scan-timeout', 'scan_timeout',
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help='Таймаут всего прогона (секунд)'
)
@click.pass_context
def scan(ctx, query, json_output, html_output, template_dir, pretty, scan_timeout):
    """Выполнить поиск по QUERY и собрать отчёт о скриптах найденных сайтов."""
    cfg = ctx.obj['config']
    if not query.strip():
        print_error('Пустой поисковый запрос')
    try:
        if scan_timeout is not None:
            report = asyncio.run(
                asyncio.wait_for(start_scan(cfg, query), timeout=scan_timeout)
            )
        else:
            report = asyncio.run(start_scan(cfg, query))
    except asyncio.TimeoutError:
        print_error(f'Прогон не завершён за {scan_timeout} секунд')
    except SearchError as e:
        print_error(f'Поиск не удался, отчёт не сформирован: {e}')
    except Exception as e:
        print_error(f'Ошибка при сканировании: {e}')

    # Если не сохраняем в файл — печатаем в stdout
    if not json_output and not html_output:
        click.echo(report.json(pretty=pretty))
        return

    # JSON-отчёт
    if json_output:
        try:
            saved_json = render_json(report, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    # HTML-отчёт
    if html_output:
        try:
            saved_html = render_html(report, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
