"""Рендереры для CLI вывода.

Функции для отображения результатов поиска, истории, подсказок
и сообщений об ошибках.
"""

from typing import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from settings_search.core import highlight
from settings_search.domain import (
    CategoryGroup,
    FieldMatch,
    PopularTermStat,
    SearchAnalytics,
    SearchHistoryEntry,
    SearchSettings,
    Suggestion,
    SuggestionType,
)

HIGHLIGHT_STYLE = "bold black on yellow"


def highlighted_text(
    text: str,
    query: str = "",
    matches: Sequence[FieldMatch] = (),
    style: str = "",
) -> Text:
    """Собирает Rich Text из сегментов подсветки."""
    result = Text(style=style)
    for segment in highlight(text, query, matches):
        result.append(segment.text, style=HIGHLIGHT_STYLE if segment.is_match else None)
    return result


def _format_score(score: float | None) -> Text:
    if score is None:
        return Text("—", style="dim")
    if score <= 0.1:
        return Text(f"{score:.3f}", style="green")
    if score <= 0.25:
        return Text(f"{score:.3f}", style="yellow")
    return Text(f"{score:.3f}", style="red")


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return "✓ on" if value else "✗ off"
    if value is None:
        return "—"
    text = str(value)
    return text if len(text) <= 40 else text[:37] + "..."


def render_search_results(
    console: Console,
    query: str,
    groups: Sequence[CategoryGroup],
    total: int,
    fuzzy: bool = True,
) -> None:
    """Отображает результаты, сгруппированные по категориям.

    Args:
        console: Rich Console.
        query: Запрос (для подсветки и заголовка).
        groups: Секции по категориям.
        total: Общее число найденных настроек.
        fuzzy: Режим поиска (для заголовка).
    """
    mode_label = "🧩 Нечёткий" if fuzzy else "🎯 Точный"
    title = f"🔍 {mode_label} поиск: [bold]{query}[/bold]" if query else "🔍 Все настройки"

    if not groups:
        console.print(Panel("[yellow]Ничего не найдено[/yellow]", title=title))
        return

    shown = sum(len(group) for group in groups)
    summary = f"[cyan]Найдено настроек: {total}[/cyan]"
    if shown < total:
        summary += f" [dim](показано {shown})[/dim]"
    console.print(Panel(summary, title=title))

    for group in groups:
        table = Table(
            title=f"{group.label} ({len(group)})",
            title_justify="left",
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("Настройка", overflow="fold")
        table.add_column("Ключ", style="dim", overflow="fold")
        table.add_column("Значение", width=14)
        table.add_column("Score", justify="right", width=7)

        for hit in group.hits:
            setting = hit.setting
            title_cell = highlighted_text(setting.display_title, query, hit.matches, "bold")
            if setting.description:
                title_cell.append("\n")
                title_cell.append_text(
                    highlighted_text(setting.description, query, hit.matches, "dim")
                )

            table.add_row(
                title_cell,
                highlighted_text(setting.key, query, hit.matches),
                _format_value(setting.value),
                _format_score(hit.score),
            )

        console.print(table)


def render_history(console: Console, entries: Sequence[SearchHistoryEntry]) -> None:
    if not entries:
        console.print("[dim]История поиска пуста[/dim]")
        return

    table = Table(title="🕘 Недавние запросы", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Запрос")
    table.add_column("Результатов", justify="right")
    table.add_column("Режим")
    table.add_column("Время", style="dim")

    for entry in entries:
        count_style = "green" if entry.successful else "red"
        table.add_row(
            entry.id,
            entry.original_term,
            Text(str(entry.result_count), style=count_style),
            entry.search_mode.value,
            entry.timestamp.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


def render_popular_terms(console: Console, stats: Sequence[PopularTermStat]) -> None:
    if not stats:
        console.print("[dim]Популярных запросов пока нет[/dim]")
        return

    table = Table(title="🔥 Популярные запросы", show_header=True, header_style="bold magenta")
    table.add_column("Запрос")
    table.add_column("Запросов", justify="right")
    table.add_column("Успешных", justify="right")
    table.add_column("Успех", justify="right")

    for stat in stats:
        table.add_row(
            stat.term,
            str(stat.count),
            str(stat.success_count),
            f"{stat.success_rate:.0%}",
        )

    console.print(table)


def render_suggestions(console: Console, suggestions: Sequence[Suggestion]) -> None:
    if not suggestions:
        console.print("[dim]Подсказок нет[/dim]")
        return

    for suggestion in suggestions:
        icon = "🕘" if suggestion.type is SuggestionType.RECENT else "🔥"
        line = Text(f"{icon} ")
        line.append(suggestion.display_text, style="bold")
        line.append(f"  {suggestion.reason}", style="dim")
        console.print(line)


def render_analytics(console: Console, analytics: SearchAnalytics) -> None:
    table = Table(title="📊 Аналитика поиска", show_header=False)
    table.add_column("Метрика", style="cyan")
    table.add_column("Значение", justify="right")

    table.add_row("Всего запросов", str(analytics.total_searches))
    table.add_row("Успешных", str(analytics.successful_searches))
    table.add_row("Доля успешных", f"{analytics.success_rate:.0%}")
    table.add_row("Уникальных запросов", str(analytics.unique_terms))
    table.add_row("За 7 дней", str(analytics.weekly_searches))
    table.add_row("За 30 дней", str(analytics.monthly_searches))
    table.add_row("Среднее число результатов", f"{analytics.average_results_per_search:.1f}")

    console.print(table)

    if analytics.top_categories:
        console.print("\n[bold]Топ категорий:[/bold]")
        for item in analytics.top_categories:
            console.print(f"  • {item.category}: {item.count}")


def render_search_settings(console: Console, settings: SearchSettings) -> None:
    table = Table(title="⚙️  Настройки истории", show_header=True, header_style="bold magenta")
    table.add_column("Настройка", style="cyan")
    table.add_column("Значение")

    for name, value in settings.model_dump().items():
        table.add_row(name, str(value))

    console.print(table)


def render_error(console: Console, message: str, title: str = "❌ Ошибка") -> None:
    console.print(Panel(f"[red]{message}[/red]", title=title))


__all__ = [
    "highlighted_text",
    "render_search_results",
    "render_history",
    "render_popular_terms",
    "render_suggestions",
    "render_analytics",
    "render_search_settings",
    "render_error",
]
