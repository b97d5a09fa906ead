# === FILE: site_purge/cli.py ===
#!/usr/bin/env python3
"""
Точка входа SitePurge: обход сайта и удаление неиспользуемых CSS-правил.

Команды:
  purge      Обойти сайт, очистить CSS и записать *.min.css
  config     Показать текущую конфигурацию
  whitelist  Показать итоговый whitelist селекторов

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/site_purge.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда purge опции:
  --url URL           Стартовый URL (или переменная окружения URL)
  --file PATH         CSS-файл (или переменная окружения FILE)
  --output PATH       Куда писать результат (default: <file>.min.css)
  --concurrency INT   Максимум одновременных запросов
  --crawl-timeout SEC Таймаут всего обхода (секунд)
  --report PATH       Сохранить JSON-отчёт о запуске

Пример:
  URL=https://example.com FILE=style.css site-purge purge
"""
import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_purge import __version__
from site_purge.config import load_config
from site_purge.engine import Engine
from site_purge.errors import SitePurgeError
from site_purge.logger import DEFAULT_FORMAT, configure
from site_purge.purge.whitelist import build_whitelist
from site_purge.report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SitePurge, version %(version)s')
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
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SitePurge CLI."""
    configure(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError, ValidationError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('purge', context_settings=CONTEXT_SETTINGS)
@click.option('--url', '-u', 'url', envvar='URL', default=None, help='Стартовый URL обхода.')
@click.option(
    '--file', '-f', 'stylesheet',
    envvar='FILE',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='CSS-файл для очистки.'
)
@click.option(
    '--output', '-o', 'output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Куда записать результат (default: <file>.min.css).'
)
@click.option('--concurrency', type=click.IntRange(min=1), default=None, help='Максимум одновременных запросов.')
@click.option('--crawl-timeout', 'crawl_timeout', type=float, default=None, help='Таймаут всего обхода (секунд).')
@click.option(
    '--report', '-r', 'report_path',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт о запуске.'
)
@click.pass_context
def purge(ctx, url, stylesheet, output, concurrency, crawl_timeout, report_path):
    """Обойти сайт и записать очищенную таблицу стилей."""
    try:
        cfg = ctx.obj['config'].with_overrides(
            url=url,
            stylesheet=stylesheet,
            output=output,
            concurrency=concurrency,
            crawl_timeout=crawl_timeout,
        )
    except ValidationError as e:
        print_error(f'Ошибка конфигурации: {e}')

    try:
        report = Engine(cfg).run()
    except SitePurgeError as e:
        print_error(f'Ошибка: {e}')

    click.echo(f'Written {report.output} ({len(report.pages)} pages, '
               f'{report.selectors_removed} selectors removed)')
    if report_path:
        saved = render_json(report, report_path)
        click.echo(f'JSON report: {saved}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


@cli.command('whitelist', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_whitelist(ctx):
    """Показать итоговый whitelist (базовый + дополнения из конфига)."""
    whitelist = build_whitelist(ctx.obj['config'])
    click.echo(json.dumps(whitelist.as_dict(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
