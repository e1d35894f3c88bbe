"""Команда categories - список категорий настроек.

Usage:
    settings-search -f settings.json categories
"""

import json
from collections import Counter

from rich.table import Table

from settings_search.cli.console import console
from settings_search.cli.commands.search_cmd import load_engine
from settings_search.core import ALL_CATEGORIES, category_label


def categories() -> None:
    """Показать категории и число настроек в каждой."""
    from settings_search.cli.app import get_cli_context

    cli_ctx = get_cli_context()
    engine = load_engine(cli_ctx)

    counts = Counter(record.category for record in engine.records)
    names = [name for name in engine.categories() if name != ALL_CATEGORIES]

    if cli_ctx.json_output:
        data = {
            "total": len(engine.records),
            "categories": [
                {"category": name, "label": category_label(name), "count": counts[name]}
                for name in names
            ],
        }
        console.print_json(json.dumps(data, ensure_ascii=False))
        return

    table = Table(title="🗂️  Категории настроек", show_header=True, header_style="bold magenta")
    table.add_column("Категория", style="cyan")
    table.add_column("Название")
    table.add_column("Настроек", justify="right")

    for name in names:
        table.add_row(name, category_label(name), str(counts[name]))

    console.print(table)
    console.print(f"[dim]Всего настроек: {len(engine.records)}[/dim]")
