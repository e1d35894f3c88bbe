"""Тесты источников корпуса: HTTP-клиент админского API и JSON-файл."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from settings_search.infrastructure.api import (
    SettingsAPIClient,
    SettingsSourceError,
    load_settings_file,
    parse_settings_payload,
)

ENHANCED = {
    "settings": [
        {
            "key": "enable_two_factor_auth",
            "value": "true",
            "data_type": "boolean",
            "category": "security",
            "search": {"title": "Two-Factor Authentication", "weight": "high"},
        }
    ]
}

BASIC = {
    "settings_by_category": {
        "email": [{"key": "smtp_enabled", "value": "true", "data_type": "boolean"}],
        "general": [{"key": "currency_code", "value": "EUR"}],
    }
}


def make_response(payload=None, error=None):
    response = MagicMock()
    if error is not None:
        response.raise_for_status.side_effect = error
    response.json.return_value = payload
    return response


@pytest.fixture
def session():
    mock = MagicMock()
    mock.headers = {}
    return mock


class TestParsePayload:
    """Тесты parse_settings_payload()."""

    def test_plain_list(self):
        records = parse_settings_payload([{"key": "a"}, {"key": "b"}])
        assert [r.key for r in records] == ["a", "b"]

    def test_enhanced_shape(self):
        [record] = parse_settings_payload(ENHANCED)
        assert record.value is True
        assert record.display_title == "Two-Factor Authentication"

    def test_basic_shape_takes_category_from_group(self):
        records = parse_settings_payload(BASIC)
        assert {(r.key, r.category) for r in records} == {
            ("smtp_enabled", "email"),
            ("currency_code", "general"),
        }

    def test_malformed_and_duplicates_skipped(self):
        records = parse_settings_payload(
            [{"key": "a"}, {"value": 1}, {"key": "b", "data_type": "blob"}, {"key": "a"}]
        )
        assert [r.key for r in records] == ["a"]

    def test_unknown_shape(self):
        with pytest.raises(SettingsSourceError):
            parse_settings_payload({"data": []})


class TestSettingsAPIClient:
    """Тесты SettingsAPIClient с замоканной requests.Session."""

    def test_enhanced_endpoint(self, session):
        session.get.return_value = make_response(ENHANCED)
        client = SettingsAPIClient("http://club.local/api/", token="secret", session=session)

        records = client.fetch_settings()

        assert [r.key for r in records] == ["enable_two_factor_auth"]
        url = session.get.call_args.args[0]
        assert url == "http://club.local/api/admin/settings/enhanced"
        assert session.headers["Authorization"] == "Bearer secret"

    def test_fallback_to_basic(self, session):
        session.get.side_effect = [
            make_response(error=requests.HTTPError("404")),
            make_response(BASIC),
        ]
        client = SettingsAPIClient("http://club.local/api", session=session)

        records = client.fetch_settings()

        assert len(records) == 2
        assert session.get.call_args.args[0] == "http://club.local/api/admin/settings"
        assert "Authorization" not in session.headers

    def test_fallback_on_bad_enhanced_payload(self, session):
        session.get.side_effect = [make_response({"weird": 1}), make_response(BASIC)]
        client = SettingsAPIClient("http://club.local/api", session=session)
        assert len(client.fetch_settings()) == 2

    def test_both_endpoints_fail(self, session):
        session.get.side_effect = requests.ConnectionError("refused")
        client = SettingsAPIClient("http://club.local/api", session=session)
        with pytest.raises(SettingsSourceError):
            client.fetch_settings()

    def test_timeout_passed(self, session):
        session.get.return_value = make_response(ENHANCED)
        SettingsAPIClient("http://x", timeout=3, session=session).fetch_settings()
        assert session.get.call_args.kwargs["timeout"] == 3

    def test_close(self, session):
        SettingsAPIClient("http://x", session=session).close()
        session.close.assert_called_once()


class TestLoadSettingsFile:
    def test_fixture_corpus(self, settings_file):
        records = load_settings_file(settings_file)
        assert len(records) == 14
        assert records[0].key == "enable_two_factor_auth"

    def test_missing_file(self, tmp_path):
        with pytest.raises(SettingsSourceError):
            load_settings_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(SettingsSourceError):
            load_settings_file(path)

    def test_list_file(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text(json.dumps([{"key": "a"}]), encoding="utf-8")
        assert [r.key for r in load_settings_file(path)] == ["a"]
