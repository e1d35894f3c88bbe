"""Команда config - просмотр конфигурации.

Подкоманды:
    show: Показать текущую конфигурацию.

Usage:
    settings-search config show
    settings-search --json config show
"""

import json
from typing import Optional

import typer
from pydantic import ValidationError
from rich.table import Table

from settings_search.cli.console import console
from settings_search.config import find_config_file

app = typer.Typer(
    help="🔧 Просмотр конфигурации.",
    no_args_is_help=True,
)


def _mask_secret(value: Optional[str]) -> str:
    """Маскирует секретное значение для вывода."""
    if not value:
        return "not set"
    if len(value) <= 8:
        return "****"
    return f"{value[:4]}***{value[-4:]}"


@app.command("show")
def show(
    reveal_secrets: bool = typer.Option(
        False,
        "--reveal",
        "-r",
        help="Показать API токен без маскировки.",
    ),
) -> None:
    """Показать текущую конфигурацию."""
    from settings_search.cli.app import get_cli_context

    cli_ctx = get_cli_context()

    try:
        config = cli_ctx.get_config()
    except ValidationError as e:
        console.print(f"[red]❌ Ошибка загрузки конфигурации: {e}[/red]")
        raise typer.Exit(1)

    toml_path = find_config_file()
    data = config.to_toml_dict()
    token = config.api_token if reveal_secrets else _mask_secret(config.api_token)
    data["api"]["token"] = token

    if cli_ctx.json_output:
        console.print_json(
            json.dumps({"source": str(toml_path) if toml_path else None, "config": data})
        )
        return

    source = str(toml_path) if toml_path else "[dim]defaults + environment[/dim]"
    console.print("\n[bold]⚙️  Текущая конфигурация[/bold]")
    console.print(f"[dim]Источник: {source}[/dim]\n")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Настройка", style="cyan")
    table.add_column("Значение")

    for section, values in data.items():
        for key, value in values.items():
            table.add_row(f"{section}.{key}", str(value))

    console.print(table)
