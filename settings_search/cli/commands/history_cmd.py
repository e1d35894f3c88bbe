"""Команда history - история поиска и аналитика.

Подкоманды:
    list: Недавние запросы.
    popular: Популярные запросы.
    suggest: Подсказки для ввода.
    analytics: Аналитика по истории.
    remove: Удалить запись.
    clear: Очистить историю и/или популярные запросы.
    export: Сохранить историю в JSON.
    import: Загрузить историю из JSON.
    settings: Показать или изменить настройки истории.

Usage:
    settings-search history list -n 20
    settings-search history suggest dar
    settings-search history export -o backup.json
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

import typer

from settings_search.cli.console import console
from settings_search.cli.ui.renderers import (
    render_analytics,
    render_error,
    render_history,
    render_popular_terms,
    render_search_settings,
    render_suggestions,
)
from settings_search.core import SearchHistoryManager
from settings_search.interfaces import StorageError

app = typer.Typer(
    help="🕘 История поиска, популярные запросы и подсказки.",
    no_args_is_help=True,
)


def _get_context_and_history():
    from settings_search.cli.app import get_cli_context

    cli_ctx = get_cli_context()
    try:
        history: SearchHistoryManager = cli_ctx.get_history()
    except StorageError as e:
        render_error(console, str(e), title="❌ Хранилище недоступно")
        raise typer.Exit(1)
    return cli_ctx, history


def _print_json(data: object) -> None:
    console.print_json(json.dumps(data, ensure_ascii=False, default=str))


@app.command("list")
def list_recent(
    limit: int = typer.Option(10, "--limit", "-n", help="Количество записей.", min=1),
) -> None:
    """Показать недавние запросы."""
    cli_ctx, history = _get_context_and_history()
    entries = history.get_recent_searches(limit)

    if cli_ctx.json_output:
        _print_json([entry.to_dict() for entry in entries])
        return

    render_history(console, entries)


@app.command("popular")
def popular(
    limit: int = typer.Option(10, "--limit", "-n", help="Количество запросов.", min=1),
) -> None:
    """Показать популярные запросы (по доле успешных, затем по частоте)."""
    cli_ctx, history = _get_context_and_history()
    stats = history.get_popular_terms(limit)

    if cli_ctx.json_output:
        _print_json(
            [
                {"term": stat.term, **stat.to_dict(), "successRate": stat.success_rate}
                for stat in stats
            ]
        )
        return

    render_popular_terms(console, stats)


@app.command("suggest")
def suggest(
    term: str = typer.Argument("", help="Текущий ввод (пусто = популярные запросы)."),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", help="Максимум подсказок.", min=1
    ),
) -> None:
    """Подсказки на основе истории и популярных запросов."""
    cli_ctx, history = _get_context_and_history()
    suggestions = history.get_suggestions(term, limit)

    if cli_ctx.json_output:
        _print_json([s.to_dict() for s in suggestions])
        return

    render_suggestions(console, suggestions)


@app.command("analytics")
def analytics() -> None:
    """Показать аналитику по истории поиска."""
    cli_ctx, history = _get_context_and_history()
    result = history.get_analytics()

    if cli_ctx.json_output:
        _print_json(result.to_dict())
        return

    render_analytics(console, result)


@app.command("remove")
def remove(
    entry_id: str = typer.Argument(..., help="ID записи (см. history list)."),
) -> None:
    """Удалить запись истории (статистика запросов не меняется)."""
    cli_ctx, history = _get_context_and_history()

    if not history.remove_item(entry_id):
        render_error(console, f"Запись {entry_id} не найдена")
        raise typer.Exit(1)

    if cli_ctx.json_output:
        _print_json({"removed": entry_id})
        return

    console.print(f"[green]✓ Запись {entry_id} удалена[/green]")


@app.command("clear")
def clear(
    popular_only: bool = typer.Option(
        False, "--popular", help="Очистить только популярные запросы."
    ),
    clear_all: bool = typer.Option(
        False, "--all", help="Очистить историю и популярные запросы."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Не спрашивать подтверждение."),
) -> None:
    """Очистить историю поиска."""
    if popular_only and clear_all:
        raise typer.BadParameter("--popular и --all взаимоисключающие")

    cli_ctx, history = _get_context_and_history()

    if clear_all:
        target = "историю и популярные запросы"
    elif popular_only:
        target = "популярные запросы"
    else:
        target = "историю поиска"

    if not yes and not typer.confirm(f"Очистить {target}?"):
        console.print("[dim]Отменено[/dim]")
        raise typer.Exit()

    if clear_all:
        history.clear_all()
    elif popular_only:
        history.clear_popular_terms()
    else:
        history.clear_history()

    if cli_ctx.json_output:
        _print_json({"cleared": "all" if clear_all else "popular" if popular_only else "history"})
        return

    console.print(f"[green]✓ Очищено: {target}[/green]")


@app.command("export")
def export(
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Файл для экспорта (по умолчанию search-history-YYYY-MM-DD.json).",
    ),
) -> None:
    """Экспортировать историю, популярные запросы и настройки в JSON."""
    cli_ctx, history = _get_context_and_history()
    data = history.export_data()

    path = output or Path(f"search-history-{date.today().isoformat()}.json")
    try:
        path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    except OSError as e:
        render_error(console, f"Не удалось записать {path}: {e}")
        raise typer.Exit(1)

    if cli_ctx.json_output:
        _print_json({"path": str(path), "history": len(data["history"])})
        return

    console.print(
        f"[green]✓ Экспортировано записей: {len(data['history'])}[/green] → {path}"
    )


@app.command("import")
def import_(
    file: Path = typer.Argument(..., help="JSON-файл экспорта."),
) -> None:
    """Импортировать историю из JSON (отсутствующие разделы не меняются)."""
    cli_ctx, history = _get_context_and_history()

    try:
        data = json.loads(file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        render_error(console, f"Не удалось прочитать {file}: {e}")
        raise typer.Exit(1)

    if not history.import_data(data):
        render_error(console, f"Некорректный формат файла {file}")
        raise typer.Exit(1)

    if cli_ctx.json_output:
        _print_json({"imported": str(file)})
        return

    console.print(f"[green]✓ Импортировано из {file}[/green]")


@app.command("settings")
def settings(
    max_history_size: Optional[int] = typer.Option(
        None, "--max-history-size", help="Максимум записей истории."
    ),
    max_suggestions: Optional[int] = typer.Option(
        None, "--max-suggestions", help="Максимум подсказок."
    ),
    retention_days: Optional[int] = typer.Option(
        None, "--retention-days", help="Срок хранения истории, дни."
    ),
    enable_history: Optional[bool] = typer.Option(
        None, "--enable-history/--disable-history", help="Записывать историю."
    ),
    enable_analytics: Optional[bool] = typer.Option(
        None, "--enable-analytics/--disable-analytics", help="Собирать статистику запросов."
    ),
) -> None:
    """Показать или изменить настройки истории."""
    cli_ctx, history = _get_context_and_history()

    changes = {
        name: value
        for name, value in {
            "max_history_size": max_history_size,
            "max_suggestions": max_suggestions,
            "retention_days": retention_days,
            "enable_history": enable_history,
            "enable_analytics": enable_analytics,
        }.items()
        if value is not None
    }

    if changes and not history.update_settings(**changes):
        render_error(console, "Некорректные значения настроек")
        raise typer.Exit(1)

    current = history.get_settings()

    if cli_ctx.json_output:
        _print_json(current.to_dict())
        return

    render_search_settings(console, current)
