"""Typer приложение - главный CLI.

Определяет глобальные опции и монтирует команды.

Attributes:
    app: Главное Typer приложение.
"""

from pathlib import Path
from typing import Optional

import typer

from settings_search.cli.context import CLIContext

# Главное приложение
app = typer.Typer(
    name="settings-search",
    help="🔍 Settings Search CLI - поиск по системным настройкам админки.",
    add_completion=True,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Хранение контекста между callback и командами
_cli_context: Optional[CLIContext] = None


def get_cli_context() -> CLIContext:
    """Получить текущий CLI контекст.

    Returns:
        CLIContext с настройками из глобальных опций (или дефолтный,
        если команда вызвана напрямую).
    """
    if _cli_context is None:
        return CLIContext()
    return _cli_context


def version_callback(value: bool) -> None:
    """Показать версию и выйти."""
    if value:
        from settings_search import __version__

        typer.echo(f"Settings Search CLI v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    storage: Optional[Path] = typer.Option(
        None,
        "--storage",
        "-s",
        help="Путь к SQLite-файлу истории поиска.",
        envvar="SETTINGS_SEARCH_STORAGE_PATH",
    ),
    settings_file: Optional[Path] = typer.Option(
        None,
        "--settings-file",
        "-f",
        help="JSON-файл с настройками (вместо админского API).",
        envvar="SETTINGS_SEARCH_SETTINGS_FILE",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Уровень логирования: TRACE, DEBUG, INFO, WARNING, ERROR.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Вывод в формате JSON (для скриптов).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Подробный вывод (эквивалент --log-level INFO).",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Показать версию и выйти.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """🔍 Settings Search CLI - поиск по системным настройкам админки."""
    global _cli_context

    _cli_context = CLIContext(
        storage_path=storage,
        settings_file=settings_file,
        log_level=log_level,
        json_output=json_output,
        verbose=verbose,
    )

    # Сохраняем в typer context для доступа из команд
    ctx.obj = _cli_context
    ctx.call_on_close(_cli_context.close)


# === Монтирование команд ===

from settings_search.cli.commands import (  # noqa: E402
    categories_cmd,
    config_cmd,
    history_cmd,
    search_cmd,
)

app.command("search")(search_cmd.search)
app.command("categories")(categories_cmd.categories)
app.add_typer(history_cmd.app, name="history")
app.add_typer(config_cmd.app, name="config")


__all__ = ["app", "get_cli_context"]
