"""Модель результата поиска.

Классы:
    FieldMatch
        Совпавшее поле записи с диапазонами символов.
    SearchHit
        Найденная настройка с score и совпадениями.
    HighlightSegment
        Фрагмент текста с признаком подсветки.
    CategoryGroup
        Секция выдачи для одной категории.
"""

from dataclasses import dataclass, field
from typing import Optional

from settings_search.domain.setting import SettingRecord


@dataclass(frozen=True)
class FieldMatch:
    """Совпадение в одном поле записи.

    Attributes:
        field: Имя поля (title, key, description, category, keywords, synonyms).
        value: Конкретное значение поля, в котором найдено совпадение.
        indices: Включительные диапазоны ``(start, end)`` внутри value.
    """

    field: str
    value: str
    indices: tuple[tuple[int, int], ...] = ()

    def to_dict(self) -> dict:
        return {
            "key": self.field,
            "value": self.value,
            "indices": [list(pair) for pair in self.indices],
        }


@dataclass(frozen=True)
class SearchHit:
    """Найденная настройка.

    Attributes:
        setting: Исходная (обогащённая) запись.
        score: Нечёткий score (0 = точное совпадение). None без fuzzy.
        matches: Совпадения по полям для подсветки.
    """

    setting: SettingRecord
    score: Optional[float] = None
    matches: tuple[FieldMatch, ...] = ()

    @property
    def key(self) -> str:
        return self.setting.key

    @property
    def category(self) -> str:
        return self.setting.category

    @property
    def title(self) -> str:
        return self.setting.display_title

    def to_dict(self) -> dict:
        data = self.setting.to_dict()
        if self.score is not None:
            data["_searchScore"] = round(self.score, 4)
        if self.matches:
            data["_searchMatches"] = [m.to_dict() for m in self.matches]
        return data

    def __repr__(self) -> str:
        score = f"{self.score:.3f}" if self.score is not None else "-"
        return f"SearchHit(key='{self.setting.key}', score={score})"


@dataclass(frozen=True)
class HighlightSegment:
    text: str
    is_match: bool = False


@dataclass
class CategoryGroup:
    """Секция выдачи.

    Attributes:
        category: Ключ категории.
        label: Заголовок для отображения ("Social features").
        hits: Результаты в порядке ранжирования.
    """

    category: str
    label: str
    hits: list[SearchHit] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.hits)
