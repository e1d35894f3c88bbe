"""Источники корпуса настроек.

Модули:
    settings_client
        HTTP-клиент админского API (requests).
    loader
        Загрузка из JSON-файла.
"""

from settings_search.infrastructure.api.settings_client import (
    SettingsAPIClient,
    SettingsSourceError,
    parse_settings_payload,
)
from settings_search.infrastructure.api.loader import load_settings_file

__all__ = [
    "SettingsAPIClient",
    "SettingsSourceError",
    "parse_settings_payload",
    "load_settings_file",
]
