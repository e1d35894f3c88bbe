"""
Конфигурация pytest для тестов settings_search.

Определяет фикстуры для:
- Тестового корпуса настроек (tests/fixtures/settings.json)
- Управляемых часов для истории поиска
- In-memory хранилища и менеджера истории
- Сброса глобального конфига между тестами
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from settings_search.config import reset_config
from settings_search.core import SearchEngine, SearchHistoryManager
from settings_search.infrastructure.api import load_settings_file
from settings_search.infrastructure.storage import MemoryKeyValueStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SETTINGS_FILE = FIXTURES_DIR / "settings.json"


class FakeClock:
    """Часы, которые двигаются только вручную."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def clean_config():
    """Глобальный конфиг не переживает тест."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def settings_file() -> Path:
    return SETTINGS_FILE


@pytest.fixture
def sample_records():
    """Корпус настроек клуба (14 штук, 5 категорий)."""
    return load_settings_file(SETTINGS_FILE)


@pytest.fixture
def engine(sample_records) -> SearchEngine:
    return SearchEngine(sample_records)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 14, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def history(memory_store, clock) -> SearchHistoryManager:
    """Менеджер истории с синхронной записью (persist_interval=0)."""
    manager = SearchHistoryManager(memory_store, clock=clock, persist_interval=0)
    yield manager
    manager.close()
