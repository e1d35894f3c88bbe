"""Тесты DTO настроек, результатов поиска и истории.

Покрытие:
- SettingRecord.from_dict: snake/camel ключи, приведение значений, ошибки
- SearchMetadata: множества без дубликатов, дефолтный вес
- SearchHistoryEntry / PopularTermStat: camelCase JSON, валидация
- SearchSettings: алиасы и ограничения
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from settings_search.domain import (
    DataType,
    FieldMatch,
    PopularTermStat,
    SearchHistoryEntry,
    SearchHit,
    SearchMetadata,
    SearchMode,
    SearchSettings,
    SearchWeight,
    SettingRecord,
)
from settings_search.domain.history import parse_iso, to_iso
from settings_search.domain.setting import humanize_key, parse_value


class TestSettingRecord:
    """Тесты SettingRecord."""

    def test_from_dict_snake_case(self):
        record = SettingRecord.from_dict(
            {
                "key": "login_attempt_limit",
                "value": "5",
                "data_type": "number",
                "category": "security",
                "search": {"title": "Login Attempt Limit", "weight": "high"},
            }
        )
        assert record.key == "login_attempt_limit"
        assert record.value == 5.0
        assert record.data_type is DataType.NUMBER
        assert record.search.weight is SearchWeight.HIGH
        assert record.display_title == "Login Attempt Limit"

    def test_from_dict_camel_case(self):
        record = SettingRecord.from_dict(
            {
                "key": "enable_dark_mode",
                "value": "true",
                "dataType": "boolean",
                "searchMetadata": {"keywords": ["night", "night", " "]},
                "isPublic": True,
            }
        )
        assert record.value is True
        assert record.is_public is True
        assert record.search.keywords == ("night",)

    def test_missing_key_raises(self):
        with pytest.raises(ValueError):
            SettingRecord.from_dict({"value": "1"})

    def test_unknown_data_type_raises(self):
        with pytest.raises(ValueError, match="Unknown data_type"):
            SettingRecord.from_dict({"key": "x", "data_type": "blob"})

    def test_defaults(self):
        record = SettingRecord.from_dict({"key": "site_logo_url"})
        assert record.category == "general"
        assert record.data_type is DataType.STRING
        assert record.search.weight is SearchWeight.MEDIUM

    def test_display_title_falls_back_to_key(self):
        record = SettingRecord(key="enable_user_follows")
        assert record.display_title == "Enable User Follows"

    def test_with_search_returns_copy(self):
        record = SettingRecord(key="a")
        updated = record.with_search(SearchMetadata(title="A"))
        assert record.search.title == ""
        assert updated.search.title == "A"


class TestValueParsing:
    """Тесты parse_value и humanize_key."""

    def test_json_value(self):
        assert parse_value('{"a": 1}', DataType.JSON) == {"a": 1}

    def test_array_value(self):
        assert parse_value('["en", "de"]', DataType.ARRAY) == ["en", "de"]

    def test_broken_json_kept_as_is(self):
        assert parse_value("{broken", DataType.JSON) == "{broken"

    def test_non_string_untouched(self):
        assert parse_value(True, DataType.BOOLEAN) is True

    def test_humanize_key(self):
        assert humanize_key("smtp_enabled") == "Smtp Enabled"


class TestSearchWeight:
    def test_rank_order(self):
        assert SearchWeight.HIGH.rank > SearchWeight.MEDIUM.rank > SearchWeight.LOW.rank

    def test_unknown_weight_defaults_to_medium(self):
        meta = SearchMetadata.from_dict({"weight": "urgent"})
        assert meta.weight is SearchWeight.MEDIUM


class TestSearchHit:
    def test_to_dict_includes_score_and_matches(self):
        hit = SearchHit(
            setting=SettingRecord(key="admin_email"),
            score=0.12346,
            matches=(FieldMatch(field="key", value="admin_email", indices=((6, 10),)),),
        )
        data = hit.to_dict()
        assert data["_searchScore"] == 0.1235
        assert data["_searchMatches"] == [
            {"key": "key", "value": "admin_email", "indices": [[6, 10]]}
        ]

    def test_to_dict_without_score(self):
        data = SearchHit(setting=SettingRecord(key="a")).to_dict()
        assert "_searchScore" not in data
        assert "_searchMatches" not in data


class TestTimestamps:
    def test_to_iso_uses_z_suffix(self):
        value = datetime(2026, 3, 14, 12, 0, 0, 123000, tzinfo=timezone.utc)
        assert to_iso(value) == "2026-03-14T12:00:00.123Z"

    def test_parse_iso_roundtrip(self):
        value = datetime(2026, 3, 14, 12, 0, 0, 123000, tzinfo=timezone.utc)
        assert parse_iso(to_iso(value)) == value

    def test_parse_naive_is_utc(self):
        parsed = parse_iso("2026-03-14T12:00:00")
        assert parsed.tzinfo is not None
        assert parsed.utcoffset().total_seconds() == 0

    def test_parse_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_iso(42)


class TestHistoryEntry:
    """Тесты SearchHistoryEntry."""

    def test_to_dict_is_camel_case(self):
        entry = SearchHistoryEntry(
            id="1",
            term="smtp",
            original_term="SMTP",
            timestamp=datetime(2026, 3, 14, tzinfo=timezone.utc),
            result_count=2,
            search_mode=SearchMode.EXACT,
            categories=["email"],
        )
        data = entry.to_dict()
        assert data["originalTerm"] == "SMTP"
        assert data["resultCount"] == 2
        assert data["searchMode"] == "exact"
        assert data["successful"] is True

    def test_from_dict_normalizes_term(self):
        entry = SearchHistoryEntry.from_dict(
            {"id": "1", "term": "  Dark Mode ", "timestamp": "2026-03-14T12:00:00.000Z"}
        )
        assert entry.term == "dark mode"
        assert entry.search_mode is SearchMode.FUZZY
        assert entry.successful is False

    def test_from_dict_requires_timestamp(self):
        with pytest.raises(KeyError):
            SearchHistoryEntry.from_dict({"term": "x"})

    def test_from_dict_rejects_bad_categories(self):
        with pytest.raises(ValueError):
            SearchHistoryEntry.from_dict(
                {"term": "x", "timestamp": "2026-03-14T12:00:00Z", "categories": "email"}
            )


class TestPopularTermStat:
    def test_record_updates_counters(self):
        when = datetime(2026, 3, 14, tzinfo=timezone.utc)
        stat = PopularTermStat(term="peat")
        stat.record(True, when)
        stat.record(False, when)
        assert stat.count == 2
        assert stat.success_count == 1
        assert stat.success_rate == 0.5
        assert stat.first_used == when

    def test_empty_success_rate(self):
        assert PopularTermStat(term="x").success_rate == 0.0

    def test_inconsistent_counters_rejected(self):
        with pytest.raises(ValueError):
            PopularTermStat.from_dict("x", {"count": 1, "successCount": 3})


class TestSearchSettings:
    def test_defaults(self):
        settings = SearchSettings()
        assert settings.max_history_size == 50
        assert settings.max_suggestions == 8
        assert settings.retention_days == 30
        assert settings.enable_history is True

    def test_camel_case_aliases(self):
        settings = SearchSettings.model_validate({"maxHistorySize": 20})
        assert settings.max_history_size == 20
        assert settings.to_dict()["maxHistorySize"] == 20

    def test_invalid_value_rejected(self):
        with pytest.raises(ValidationError):
            SearchSettings(max_history_size=0)
