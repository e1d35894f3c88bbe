"""Группировка и подсветка результатов.

Функции:
    category_label
        Заголовок секции из ключа категории.
    group_by_category
        Секции по категориям (алфавитно), внутри - порядок ранжирования.
    highlight
        Разбивка текста на подсвеченные и обычные сегменты.
"""

import re
from typing import Iterable, Sequence

from settings_search.domain import CategoryGroup, FieldMatch, HighlightSegment, SearchHit


def category_label(category: str) -> str:
    """social_features -> Social features."""
    text = category.replace("_", " ")
    return text[:1].upper() + text[1:]


def group_by_category(hits: Iterable[SearchHit]) -> list[CategoryGroup]:
    """Группирует результаты по категориям.

    Секции упорядочены по ключу категории; внутри секции сохраняется
    порядок из входной последовательности.
    """
    groups: dict[str, CategoryGroup] = {}

    for hit in hits:
        category = hit.setting.category
        group = groups.get(category)
        if group is None:
            group = groups[category] = CategoryGroup(
                category=category,
                label=category_label(category),
            )
        group.hits.append(hit)

    return [groups[key] for key in sorted(groups)]


def _merge_ranges(ranges: Iterable[tuple[int, int]]) -> list[tuple[int, int]]:
    """Сливает пересекающиеся и соседние включительные диапазоны."""
    merged: list[tuple[int, int]] = []
    for start, end in sorted(ranges):
        if merged and start <= merged[-1][1] + 1:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def _token_ranges(text: str, query: str) -> list[tuple[int, int]]:
    ranges = []
    for token in query.split():
        if len(token) <= 1:
            continue
        for found in re.finditer(re.escape(token), text, flags=re.IGNORECASE):
            ranges.append((found.start(), found.end() - 1))
    return ranges


def highlight(
    text: str,
    query: str = "",
    matches: Sequence[FieldMatch] = (),
) -> list[HighlightSegment]:
    """Разбивает text на сегменты для подсветки.

    Если среди matches есть совпадение именно для этого значения,
    подсвечиваются его диапазоны. Иначе подсвечивается каждое вхождение
    каждого слова запроса длиннее одного символа (без учёта регистра).
    Пересекающиеся диапазоны сливаются.

    Returns:
        Сегменты, которые в сумме дают исходный text.
    """
    if not text:
        return []

    ranges: list[tuple[int, int]] = []
    field_matches = [m for m in matches if m.value == text]
    if field_matches:
        for match in field_matches:
            ranges.extend(match.indices)
    elif query:
        ranges = _token_ranges(text, query)

    bounded = [
        (max(0, start), min(len(text) - 1, end))
        for start, end in ranges
        if start <= end and start < len(text)
    ]
    if not bounded:
        return [HighlightSegment(text)]

    segments: list[HighlightSegment] = []
    cursor = 0
    for start, end in _merge_ranges(bounded):
        if start > cursor:
            segments.append(HighlightSegment(text[cursor:start]))
        segments.append(HighlightSegment(text[start : end + 1], is_match=True))
        cursor = end + 1
    if cursor < len(text):
        segments.append(HighlightSegment(text[cursor:]))

    return segments
