# === FILE: site_kb/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для построения базы знаний сайта через командную строку.

Подкоманды:
  crawl URL   Обойти сайт (sitemap + ссылки) и вывести/сохранить базу знаний
  config      Показать текущую конфигурацию

Опции группы (до имени подкоманды):
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования (e.g. "%(asctime)s %(levelname)s %(message)s")

Опции crawl:
  --max-depth INT     Максимальная глубина обхода ссылок (override max_depth)
  --max-pages INT     Макс. число страниц (override max_pages)
  --json PATH         Сохранить базу знаний в JSON-файл
  --text PATH         Сохранить текстовую версию базы знаний
  --template DIR      Папка с Jinja2-шаблоном knowledge_base.txt.j2
  --pretty            Преформатировать JSON-вывод (отступ 2)
  --scan-timeout SEC  Таймаут всего обхода (секунд)
  --show-errors       Вывести ошибки загрузки отдельных URL в stderr

Прочее:
  --version, -v       Показать версию site_kb

Пример запуска:
  site-kb crawl example.de --max-pages 10 --json kb.json --pretty
"""
import asyncio
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_kb import __version__
from site_kb.config import load_config
from site_kb.engine import Engine
from site_kb.errors import ParseError
from site_kb.logger import init_logging
from site_kb.report.json_report import render_json
from site_kb.report.text_report import render_text
from site_kb.utils import ensure_protocol

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='site_kb, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML или JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
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
    default='%(asctime)s %(levelname)s %(name)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд site_kb CLI."""
    init_logging(
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


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--max-depth', 'max_depth', type=click.IntRange(min=0), default=None,
              help='Максимальная глубина обхода ссылок')
@click.option('--max-pages', 'max_pages', type=click.IntRange(min=1), default=None,
              help='Макс. число страниц')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить базу знаний в JSON-файл'
)
@click.option(
    '--text', '-t', 'text_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить текстовую версию базы знаний'
)
@click.option(
    '--template', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблоном (по умолчанию шаблон из пакета)'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.option(
    '--scan-timeout', 'scan_timeout',
    type=float,
    default=None,
    help='Таймаут всего обхода (секунд)'
)
@click.option(
    '--show-errors', is_flag=True,
    help='Вывести ошибки загрузки отдельных URL'
)
@click.pass_context
def crawl(ctx, url, max_depth, max_pages, json_output, text_output, template_dir,
          pretty, scan_timeout, show_errors):
    """Обойти сайт URL и построить базу знаний."""
    cfg = ctx.obj['config']
    start_url = ensure_protocol(url)
    engine = Engine(cfg)
    try:
        result = engine.run(
            start_url,
            max_depth=max_depth,
            max_pages=max_pages,
            timeout=scan_timeout,
        )
    except asyncio.TimeoutError:
        print_error(f'Обход не завершён за {scan_timeout} секунд')
    except ParseError as e:
        print_error(f'Некорректный URL: {e}')
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    if show_errors or result.pages_crawled == 0:
        for error in result.errors:
            click.secho(f'{error.url}: {error.message}', fg='yellow', err=True)

    if result.pages_crawled == 0:
        print_error(f'No pages could be crawled from {start_url}')

    kb = result.knowledge_base

    # Если не сохраняем в файл, печатаем в stdout
    if not json_output and not text_output:
        click.echo(kb.json(pretty=pretty))
        return

    if json_output:
        try:
            saved_json = render_json(kb, json_output, pretty=pretty)
            click.echo(f'JSON knowledge base: {saved_json}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if text_output:
        try:
            saved_text = render_text(kb, template_dir, text_output)
            click.echo(f'Text knowledge base: {saved_text}')
        except OSError as e:
            print_error(f'Ошибка при сохранении текста: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


# expose these names at module level for test monkey-patching
cli.Engine = Engine
cli.render_json = render_json
cli.render_text = render_text

if __name__ == "__main__":
    cli()
