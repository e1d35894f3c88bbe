"""Команда search для CLI.

Поиск по системным настройкам с группировкой по категориям.

Usage:
    settings-search -f settings.json search "2fa"
    settings-search -f settings.json search emial             # нечёткий поиск
    settings-search -f settings.json search email --exact     # подстрока
    settings-search -f settings.json search smtp -c email -n 5
"""

import json
from typing import Optional

import typer

from settings_search.cli.console import console
from settings_search.cli.context import CLIContext, CorpusNotConfiguredError
from settings_search.cli.ui.renderers import render_error, render_search_results
from settings_search.core import ALL_CATEGORIES, SearchEngine, group_by_category
from settings_search.domain import SearchMode
from settings_search.infrastructure.api import SettingsSourceError
from settings_search.interfaces import StorageError
from settings_search.utils.logger import get_logger

logger = get_logger(__name__)


def load_engine(cli_ctx: CLIContext) -> SearchEngine:
    """Загружает движок или завершает команду с кодом 1."""
    try:
        return cli_ctx.get_engine()
    except (CorpusNotConfiguredError, SettingsSourceError) as e:
        render_error(console, str(e), title="❌ Настройки не загружены")
        raise typer.Exit(1)


def search(
    query: str = typer.Argument(
        ...,
        help="Поисковый запрос (можно с опечатками).",
    ),
    category: str = typer.Option(
        ALL_CATEGORIES,
        "--category",
        "-c",
        help="Фильтр по категории (all = без фильтра).",
    ),
    exact: bool = typer.Option(
        False,
        "--exact",
        "-e",
        help="Точный поиск подстроки вместо нечёткого.",
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        help="Максимальное количество результатов.",
        min=1,
    ),
    no_history: bool = typer.Option(
        False,
        "--no-history",
        help="Не записывать запрос в историю.",
    ),
) -> None:
    """Найти настройки по запросу.

    Примеры:
        settings-search -f settings.json search "2fa"
        settings-search -f settings.json search "dark mode" --exact
    """
    # Late import to avoid circular dependency
    from settings_search.cli.app import get_cli_context

    cli_ctx = get_cli_context()
    engine = load_engine(cli_ctx)

    if category != ALL_CATEGORIES and category not in engine.categories():
        raise typer.BadParameter(
            f"Неизвестная категория: {category}. "
            f"Доступные: {', '.join(engine.categories())}",
            param_hint="--category",
        )

    fuzzy = not exact and cli_ctx.get_config().fuzzy_enabled
    hits = engine.search(query, category, fuzzy_enabled=fuzzy)
    term = query.strip()

    if term and not no_history:
        try:
            history = cli_ctx.get_history()
        except StorageError as e:
            logger.warning("History storage unavailable", error=str(e))
        else:
            history.add_search(term, hits, SearchMode.FUZZY if fuzzy else SearchMode.EXACT)

    shown = hits[:limit] if limit else hits

    if cli_ctx.json_output:
        data = {
            "query": term,
            "category": category,
            "mode": SearchMode.FUZZY.value if fuzzy else SearchMode.EXACT.value,
            "count": len(hits),
            "results": [hit.to_dict() for hit in shown],
        }
        console.print_json(json.dumps(data, ensure_ascii=False, default=str))
        return

    render_search_results(console, term, group_by_category(shown), len(hits), fuzzy=fuzzy)
