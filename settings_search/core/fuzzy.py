"""Нечёткое сопоставление запроса с настройками.

Схожесть поля считается через ``fuzzywuzzy.fuzz.partial_ratio``, если
запрос не длиннее значения, и через ``fuzz.ratio`` иначе. Диапазоны для подсветки берутся из блоков совпадения difflib.

Score записи лежит в [0, 1], где 0 = точное совпадение. Для поля::

    score = 1 - similarity * sqrt(weight / max_weight)

Score записи - лучший (минимальный) score среди полей. Запись попадает
в выдачу, если score <= threshold.

Классы:
    FuzzyMatcher
        Сопоставитель с весами полей и порогом.

Константы:
    FIELD_WEIGHTS
        Веса полей поиска.
"""

import math
from difflib import SequenceMatcher
from typing import Optional, Sequence

from fuzzywuzzy import fuzz

from settings_search.domain import FieldMatch, SearchHit, SettingRecord
from settings_search.utils.logger import get_logger

logger = get_logger(__name__)


FIELD_WEIGHTS: dict[str, float] = {
    "title": 0.4,
    "key": 0.3,
    "description": 0.25,
    "category": 0.15,
    "keywords": 0.2,
    "synonyms": 0.25,
}

DEFAULT_THRESHOLD = 0.4
DEFAULT_MIN_MATCH_CHAR_LENGTH = 2


def record_field_values(record: SettingRecord) -> dict[str, tuple[str, ...]]:
    """Значения полей записи, участвующие в поиске."""
    return {
        "title": (record.display_title,),
        "key": (record.key,),
        "description": (record.description,) if record.description else (),
        "category": (record.category,) if record.category else (),
        "keywords": record.search.keywords,
        "synonyms": record.search.synonyms,
    }


def match_ranges(query: str, value: str, min_length: int) -> tuple[tuple[int, int], ...]:
    """Включительные диапазоны символов value, совпавшие с query.

    Регистр не учитывается. Блоки короче min_length отбрасываются.
    """
    matcher = SequenceMatcher(None, query.lower(), value.lower(), autojunk=False)
    return tuple(
        (block.b, block.b + block.size - 1)
        for block in matcher.get_matching_blocks()
        if block.size >= min_length
    )


class FuzzyMatcher:
    """Взвешенный нечёткий поиск по полям настройки.

    Attributes:
        threshold: Максимальный score совпадения (0 = только точные).
        min_match_char_length: Минимальная длина диапазона подсветки.
        weights: Веса полей.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        min_match_char_length: int = DEFAULT_MIN_MATCH_CHAR_LENGTH,
        weights: Optional[dict[str, float]] = None,
    ):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be in [0, 1], got {threshold}")

        self.threshold = threshold
        self.min_match_char_length = max(1, min_match_char_length)
        self.weights = dict(weights or FIELD_WEIGHTS)

        max_weight = max(self.weights.values())
        self._boost = {
            name: math.sqrt(weight / max_weight) for name, weight in self.weights.items()
        }

    def _field_score(self, query: str, field: str, value: str) -> float:
        value = value.lower()
        # partial_ratio ищет короткую строку в длинной: значение короче
        # запроса сравниваем целиком, иначе любое вхождение даёт 100
        if len(query) <= len(value):
            similarity = fuzz.partial_ratio(query, value) / 100
        else:
            similarity = fuzz.ratio(query, value) / 100
        return 1.0 - similarity * self._boost[field]

    def match(self, query: str, record: SettingRecord) -> Optional[SearchHit]:
        """Сопоставляет запрос с одной записью.

        Args:
            query: Нормализованный (lower) непустой запрос.
            record: Настройка.

        Returns:
            SearchHit со score и совпадениями или None.
        """
        best_score = 1.0
        matches: list[FieldMatch] = []

        for field, values in record_field_values(record).items():
            if field not in self.weights:
                continue

            for value in values:
                if not value:
                    continue

                score = self._field_score(query, field, value)
                if score > self.threshold:
                    continue

                best_score = min(best_score, score)
                indices = match_ranges(query, value, self.min_match_char_length)
                if indices:
                    matches.append(FieldMatch(field=field, value=value, indices=indices))

        if best_score > self.threshold:
            return None

        return SearchHit(setting=record, score=best_score, matches=tuple(matches))

    def search(self, query: str, records: Sequence[SettingRecord]) -> list[SearchHit]:
        """Возвращает совпавшие записи в исходном порядке (без сортировки)."""
        normalized = query.strip().lower()
        if not normalized:
            return []

        hits = []
        for record in records:
            hit = self.match(normalized, record)
            if hit is not None:
                hits.append(hit)

        logger.trace(
            "Fuzzy pass complete",
            query=normalized,
            candidates=len(records),
            hits=len(hits),
        )
        return hits
