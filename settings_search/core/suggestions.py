"""Подсказки автодополнения по истории и популярным запросам.

Функции:
    rank_popular_terms
        Сортировка популярных запросов для выдачи.
    build_suggestions
        Подсказки для текущего ввода.
"""

from typing import Iterable, Sequence

from settings_search.domain import (
    PopularTermStat,
    SearchHistoryEntry,
    Suggestion,
    SuggestionType,
)


def _percent(rate: float) -> int:
    # Округление половины вверх, как в веб-интерфейсе
    return int(rate * 100 + 0.5)


def rank_popular_terms(stats: Iterable[PopularTermStat]) -> list[PopularTermStat]:
    """Сортирует по success rate, затем по числу запросов, затем по term."""
    return sorted(stats, key=lambda s: (-s.success_rate, -s.count, s.term))


def popular_suggestion(stat: PopularTermStat, reason: str) -> Suggestion:
    return Suggestion(
        term=stat.term,
        display_text=stat.term,
        type=SuggestionType.POPULAR,
        reason=reason,
        count=stat.count,
        success_rate=stat.success_rate,
    )


def build_suggestions(
    current_term: str,
    history: Sequence[SearchHistoryEntry],
    popular: Iterable[PopularTermStat],
    limit: int,
) -> list[Suggestion]:
    """Строит подсказки для текущего ввода.

    Пустой ввод: топ популярных запросов. Иначе до ``limit // 2`` (минимум
    одной) подсказок каждого типа из запросов, которые содержат ввод, но
    не равны ему: сначала недавние, затем популярные. Дубликаты по
    нормализованному запросу отбрасываются, первое вхождение остаётся.

    Args:
        current_term: Текущий ввод пользователя.
        history: Записи истории (новые первыми).
        popular: Статистика популярных запросов.
        limit: Максимальное число подсказок.
    """
    if limit <= 0:
        return []

    normalized = current_term.strip().lower()

    if not normalized:
        return [
            popular_suggestion(
                stat,
                f"{stat.count} searches ({_percent(stat.success_rate)}% success)",
            )
            for stat in rank_popular_terms(popular)[:limit]
        ]

    quota = max(1, limit // 2)

    recent = [
        Suggestion(
            term=entry.original_term,
            display_text=entry.original_term,
            type=SuggestionType.RECENT,
            reason=f"Recent search ({entry.result_count} results)",
            result_count=entry.result_count,
            timestamp=entry.timestamp,
        )
        for entry in history
        if normalized in entry.term and entry.term != normalized
    ][:quota]

    matching_popular = [
        stat for stat in popular if normalized in stat.term and stat.term != normalized
    ]
    matching_popular.sort(key=lambda s: (-s.count, s.term))
    popular_matches = [
        popular_suggestion(stat, f"Popular ({stat.count} searches)")
        for stat in matching_popular[:quota]
    ]

    suggestions: list[Suggestion] = []
    seen: set[str] = set()
    for suggestion in (*recent, *popular_matches):
        key = suggestion.term.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        suggestions.append(suggestion)

    return suggestions[:limit]
