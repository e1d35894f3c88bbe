"""Загрузка корпуса настроек из JSON-файла.

Функции:
    load_settings_file
        Читает список SettingRecord из файла.
"""

import json
from pathlib import Path

from settings_search.domain import SettingRecord
from settings_search.infrastructure.api.settings_client import (
    SettingsSourceError,
    parse_settings_payload,
)
from settings_search.utils.logger import get_logger

logger = get_logger(__name__)


def load_settings_file(path: str | Path) -> list[SettingRecord]:
    """Загружает настройки из JSON-файла.

    Файл может содержать список настроек или сохранённый ответ API
    (``{"settings": [...]}`` / ``{"settings_by_category": {...}}``).

    Raises:
        SettingsSourceError: Файл не найден, не JSON или неизвестного формата.
    """
    path = Path(path).expanduser()

    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except OSError as e:
        raise SettingsSourceError(f"Cannot read settings file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SettingsSourceError(f"Settings file {path} is not valid JSON: {e}") from e

    records = parse_settings_payload(payload)
    logger.info("Loaded settings file", path=str(path), count=len(records))
    return records
