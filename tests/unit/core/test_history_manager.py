"""Тесты SearchHistoryManager.

Покрытие:
- Запись запросов: нормализация, дубликаты, лимит, отключение истории
- Популярные запросы и их ранжирование
- Загрузка: срок хранения, повреждённые данные, недоступное хранилище
- Отложенная и немедленная запись
- Экспорт / импорт
"""

import json
from datetime import timedelta

import pytest

from settings_search.core import (
    HISTORY_KEY,
    POPULAR_TERMS_KEY,
    SETTINGS_KEY,
    SearchHistoryManager,
)
from settings_search.domain import SearchMode, SearchSettings, SettingRecord
from settings_search.domain.history import to_iso
from settings_search.infrastructure.storage import MemoryKeyValueStore
from settings_search.interfaces import BaseKeyValueStore, StorageError


def records(*categories):
    return [SettingRecord(key=f"setting_{i}", category=c) for i, c in enumerate(categories)]


class FailingStore(BaseKeyValueStore):
    """Хранилище, которое всегда падает."""

    def get(self, key):
        raise StorageError("quota exceeded")

    def set(self, key, value):
        raise StorageError("quota exceeded")

    def delete(self, key):
        raise StorageError("quota exceeded")


class TestAddSearch:
    """Тесты add_search()."""

    def test_entry_fields(self, history, clock):
        entry = history.add_search("  Dark Mode ", records("appearance", "appearance"))
        assert entry.term == "dark mode"
        assert entry.original_term == "Dark Mode"
        assert entry.result_count == 2
        assert entry.categories == ["appearance"]
        assert entry.search_mode is SearchMode.FUZZY
        assert entry.timestamp == clock.now
        assert history.get_recent_searches() == [entry]

    def test_blank_term_ignored(self, history):
        assert history.add_search("   ", records("email")) is None
        assert history.get_recent_searches() == []
        assert history.get_popular_terms() == []

    def test_newest_first(self, history, clock):
        history.add_search("smtp")
        clock.advance(seconds=10)
        history.add_search("2fa")
        assert [e.term for e in history.get_recent_searches()] == ["2fa", "smtp"]

    def test_duplicate_within_window_suppressed(self, history, clock):
        first = history.add_search("smtp", records("email"))
        clock.advance(seconds=2)
        assert history.add_search("SMTP", records("email")) is None

        assert history.get_recent_searches() == [first]
        [stat] = history.get_popular_terms()
        assert stat.count == 2

    def test_repeat_after_window_moves_to_front(self, history, clock):
        history.add_search("smtp")
        clock.advance(seconds=10)
        history.add_search("2fa")
        clock.advance(seconds=10)
        entry = history.add_search("smtp")

        recent = history.get_recent_searches()
        assert [e.term for e in recent] == ["smtp", "2fa"]
        assert recent[0] is entry

    def test_history_capped(self, history, clock):
        for i in range(55):
            history.add_search(f"term {i}")
            clock.advance(seconds=1)
        recent = history.get_recent_searches(100)
        assert len(recent) == 50
        assert recent[0].term == "term 54"

    def test_unique_ids(self, history, clock):
        ids = set()
        for i in range(5):
            ids.add(history.add_search(f"q{i}").id)
        assert len(ids) == 5

    def test_disabled_history_records_nothing(self, history):
        history.update_settings(enable_history=False)
        assert history.add_search("smtp", records("email")) is None
        assert history.get_recent_searches() == []
        assert history.get_popular_terms() == []

    def test_disabled_analytics_skips_popular(self, history):
        history.update_settings(enable_analytics=False)
        assert history.add_search("smtp") is not None
        assert history.get_popular_terms() == []

    def test_exact_mode(self, history):
        entry = history.add_search("smtp", mode="exact")
        assert entry.search_mode is SearchMode.EXACT

    def test_unknown_mode_not_recorded(self, history):
        assert history.add_search("smtp", records("email"), mode="semantic") is None
        assert history.get_recent_searches() == []
        assert history.get_popular_terms() == []


class TestPopularTerms:
    """Сценарий: статистика популярных запросов."""

    def test_ranking_by_success_rate(self, history, clock):
        history.add_search("peat", records("general"))
        clock.advance(seconds=10)
        history.add_search("peat", [])
        clock.advance(seconds=10)
        history.add_search("islay", records("general"))

        popular = history.get_popular_terms(2)
        assert [s.term for s in popular] == ["islay", "peat"]
        assert popular[1].count == 2
        assert popular[1].success_rate == 0.5

    def test_ties_by_count_then_term(self, history, clock):
        for term in ("b", "a", "a", "c"):
            history.add_search(term, records("x"))
            clock.advance(seconds=10)
        assert [s.term for s in history.get_popular_terms()] == ["a", "b", "c"]

    def test_remove_item_keeps_stats(self, history):
        entry = history.add_search("smtp", records("email"))
        assert history.remove_item(entry.id) is True
        assert history.get_recent_searches() == []
        assert history.get_popular_terms()[0].count == 1

    def test_remove_unknown_item(self, history):
        assert history.remove_item("nope") is False

    def test_returned_stats_are_copies(self, history):
        history.add_search("smtp")
        history.get_popular_terms()[0].count = 100
        assert history.get_popular_terms()[0].count == 1


class TestLoading:
    """Загрузка состояния из хранилища."""

    def _entry(self, term, when):
        return {
            "id": term,
            "term": term,
            "originalTerm": term,
            "timestamp": to_iso(when),
            "resultCount": 1,
            "searchMode": "fuzzy",
            "categories": [],
        }

    def test_expired_entries_dropped(self, clock):
        store = MemoryKeyValueStore(
            {
                HISTORY_KEY: json.dumps(
                    [
                        self._entry("fresh", clock.now - timedelta(days=1)),
                        self._entry("old", clock.now - timedelta(days=40)),
                    ]
                )
            }
        )
        manager = SearchHistoryManager(store, clock=clock)
        assert [e.term for e in manager.get_recent_searches()] == ["fresh"]

    def test_duplicate_terms_collapsed(self, clock):
        store = MemoryKeyValueStore(
            {
                HISTORY_KEY: json.dumps(
                    [
                        self._entry("smtp", clock.now - timedelta(hours=1)),
                        self._entry("smtp", clock.now - timedelta(hours=2)),
                    ]
                )
            }
        )
        manager = SearchHistoryManager(store, clock=clock)
        assert len(manager.get_recent_searches()) == 1

    def test_corrupt_entry_skipped(self, clock):
        store = MemoryKeyValueStore(
            {
                HISTORY_KEY: json.dumps(
                    [{"term": "broken"}, self._entry("ok", clock.now)]
                )
            }
        )
        manager = SearchHistoryManager(store, clock=clock)
        assert [e.term for e in manager.get_recent_searches()] == ["ok"]

    def test_corrupt_json_gives_empty_state(self, clock):
        store = MemoryKeyValueStore(
            {HISTORY_KEY: "{not json", POPULAR_TERMS_KEY: "[]", SETTINGS_KEY: "oops"}
        )
        manager = SearchHistoryManager(store, clock=clock)
        assert manager.get_recent_searches() == []
        assert manager.get_popular_terms() == []
        assert manager.get_settings() == SearchSettings()

    def test_stored_settings_merged_with_defaults(self, clock):
        store = MemoryKeyValueStore({SETTINGS_KEY: json.dumps({"maxSuggestions": 3})})
        manager = SearchHistoryManager(
            store, clock=clock, defaults=SearchSettings(retention_days=7)
        )
        settings = manager.get_settings()
        assert settings.max_suggestions == 3
        assert settings.retention_days == 7

    def test_unavailable_storage(self, clock):
        manager = SearchHistoryManager(FailingStore(), clock=clock, persist_interval=0)
        entry = manager.add_search("smtp", records("email"))
        assert entry is not None
        assert manager.get_recent_searches() == [entry]
        assert manager.update_settings(max_suggestions=4) is False
        manager.clear_all()
        manager.close()


class TestPersistence:
    """Отложенная и немедленная запись."""

    def test_add_search_is_throttled(self, memory_store, clock):
        manager = SearchHistoryManager(memory_store, clock=clock, persist_interval=60)
        manager.add_search("smtp")
        manager.add_search("2fa")
        assert memory_store.get(HISTORY_KEY) is None

        assert manager.flush() is True
        stored = json.loads(memory_store.get(HISTORY_KEY))
        assert [e["term"] for e in stored] == ["2fa", "smtp"]
        assert "smtp" in json.loads(memory_store.get(POPULAR_TERMS_KEY))
        manager.close()

    def test_flush_without_changes(self, memory_store, clock):
        manager = SearchHistoryManager(memory_store, clock=clock, persist_interval=60)
        assert manager.flush() is False

    def test_state_survives_restart(self, memory_store, clock):
        manager = SearchHistoryManager(memory_store, clock=clock, persist_interval=60)
        entry = manager.add_search("Dark Mode", records("appearance"))
        manager.close()

        restored = SearchHistoryManager(memory_store, clock=clock)
        assert restored.get_recent_searches() == [entry]
        assert restored.get_popular_terms()[0].term == "dark mode"

    def test_settings_saved_immediately(self, memory_store, clock):
        manager = SearchHistoryManager(memory_store, clock=clock, persist_interval=60)
        assert manager.update_settings(max_history_size=2) is True
        assert json.loads(memory_store.get(SETTINGS_KEY))["maxHistorySize"] == 2

    def test_shrinking_limit_trims_history(self, history, clock):
        for term in ("a", "b", "c"):
            history.add_search(term)
            clock.advance(seconds=1)
        history.update_settings(max_history_size=2)
        assert [e.term for e in history.get_recent_searches()] == ["c", "b"]

    def test_invalid_settings_rejected(self, history):
        assert history.update_settings(max_history_size=0) is False
        assert history.update_settings(colour="red") is False
        assert history.get_settings() == SearchSettings()

    def test_clear_operations(self, history, memory_store):
        history.add_search("smtp")
        history.clear_history()
        assert history.get_recent_searches() == []
        assert history.get_popular_terms() != []
        assert json.loads(memory_store.get(HISTORY_KEY)) == []

        history.clear_popular_terms()
        assert history.get_popular_terms() == []
        assert json.loads(memory_store.get(POPULAR_TERMS_KEY)) == {}

    def test_clear_all(self, history):
        history.add_search("smtp")
        history.clear_all()
        assert history.get_recent_searches() == []
        assert history.get_popular_terms() == []


class TestAnalytics:
    def test_empty(self, history):
        analytics = history.get_analytics()
        assert analytics.total_searches == 0
        assert analytics.success_rate == 0.0

    def test_aggregates(self, history, clock):
        history.add_search("smtp", records("email", "email", "security"))
        clock.advance(days=10)
        history.add_search("2fa", records("security"))
        clock.advance(seconds=10)
        history.add_search("zzz", [])

        analytics = history.get_analytics()
        assert analytics.total_searches == 3
        assert analytics.successful_searches == 2
        assert analytics.success_rate == pytest.approx(2 / 3)
        assert analytics.unique_terms == 3
        assert analytics.weekly_searches == 2
        assert analytics.monthly_searches == 3
        assert analytics.average_results_per_search == pytest.approx(4 / 3)
        assert [(c.category, c.count) for c in analytics.top_categories] == [
            ("security", 2),
            ("email", 1),
        ]


class TestExportImport:
    """Экспорт и импорт состояния."""

    def test_roundtrip(self, history, clock):
        history.add_search("Dark Mode", records("appearance"))
        clock.advance(seconds=30)
        history.add_search("smtp", records("email"), SearchMode.EXACT)
        history.update_settings(max_suggestions=5)

        data = json.loads(json.dumps(history.export_data()))
        assert set(data) == {"settings", "history", "popularTerms", "analytics", "exportDate"}

        other = SearchHistoryManager(MemoryKeyValueStore(), clock=clock, persist_interval=0)
        assert other.import_data(data) is True
        assert other.get_recent_searches() == history.get_recent_searches()
        assert other.get_popular_terms() == history.get_popular_terms()
        assert other.get_settings() == history.get_settings()

    def test_missing_sections_untouched(self, history):
        history.add_search("smtp")
        assert history.import_data({"popularTerms": {}}) is True
        assert [e.term for e in history.get_recent_searches()] == ["smtp"]
        assert history.get_popular_terms() == []

    def test_malformed_payload_leaves_state(self, history):
        history.add_search("smtp")
        assert history.import_data("nope") is False
        assert history.import_data({"history": [{"term": "x"}]}) is False
        assert history.import_data({"history": {}}) is False
        assert history.import_data({"settings": {"maxHistorySize": -1}}) is False
        assert [e.term for e in history.get_recent_searches()] == ["smtp"]

    def test_import_persists(self, history, memory_store, clock):
        payload = {
            "history": [
                {
                    "id": "1",
                    "term": "peat",
                    "originalTerm": "Peat",
                    "timestamp": to_iso(clock.now),
                    "resultCount": 0,
                }
            ]
        }
        assert history.import_data(payload) is True
        stored = json.loads(memory_store.get(HISTORY_KEY))
        assert stored[0]["originalTerm"] == "Peat"

    def test_import_collapses_duplicates_and_drops_expired(self, history, clock):
        def entry(entry_id, term, when):
            return {
                "id": entry_id,
                "term": term,
                "originalTerm": term,
                "timestamp": to_iso(when),
                "resultCount": 1,
            }

        payload = {
            "history": [
                entry("1", "peat", clock.now - timedelta(hours=1)),
                entry("2", "Peat", clock.now - timedelta(hours=2)),
                entry("3", "sherry cask", clock.now - timedelta(days=40)),
            ]
        }
        assert history.import_data(payload) is True

        recent = history.get_recent_searches()
        assert [(e.id, e.term) for e in recent] == [("1", "peat")]

    def test_import_respects_imported_history_limit(self, history, clock):
        payload = {
            "settings": {"maxHistorySize": 1},
            "history": [
                {"id": str(i), "term": term, "timestamp": to_iso(clock.now), "resultCount": 0}
                for i, term in enumerate(["peat", "smoke"])
            ],
        }
        assert history.import_data(payload) is True
        assert [e.term for e in history.get_recent_searches()] == ["peat"]
