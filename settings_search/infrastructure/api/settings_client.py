"""HTTP-клиент админского API настроек.

Классы:
    SettingsSourceError
        Корпус настроек не удалось получить или разобрать.
    SettingsAPIClient
        Загрузка настроек с fallback с enhanced на базовый endpoint.

Функции:
    parse_settings_payload
        Разбор любого поддерживаемого формата ответа в список SettingRecord.
"""

from typing import Any, Optional

import requests

from settings_search.domain import SettingRecord
from settings_search.utils.logger import get_logger

logger = get_logger(__name__)

ENHANCED_ENDPOINT = "/admin/settings/enhanced"
BASIC_ENDPOINT = "/admin/settings"


class SettingsSourceError(Exception):
    """Не удалось получить корпус настроек."""


def parse_settings_payload(payload: Any) -> list[SettingRecord]:
    """Разбирает ответ API или содержимое JSON-файла.

    Поддерживаемые формы:
        - список настроек;
        - ``{"settings": [...]}`` (enhanced endpoint);
        - ``{"settings_by_category": {"email": [...], ...}}`` (базовый endpoint).

    Записи без ключа или с неизвестным типом пропускаются с предупреждением.

    Raises:
        SettingsSourceError: Неизвестная форма payload.
    """
    if isinstance(payload, list):
        raw_items = payload
    elif isinstance(payload, dict) and isinstance(payload.get("settings"), list):
        raw_items = payload["settings"]
    elif isinstance(payload, dict) and isinstance(payload.get("settings_by_category"), dict):
        raw_items = []
        for category, items in payload["settings_by_category"].items():
            if not isinstance(items, list):
                continue
            for item in items:
                if isinstance(item, dict):
                    raw_items.append({"category": category, **item})
    else:
        raise SettingsSourceError("Unsupported settings payload shape")

    records: list[SettingRecord] = []
    seen: set[str] = set()

    for item in raw_items:
        try:
            record = SettingRecord.from_dict(item)
        except ValueError as e:
            logger.warning("Skipping malformed setting", error=str(e))
            continue

        if record.key in seen:
            logger.warning("Skipping duplicate setting", setting_key=record.key)
            continue

        seen.add(record.key)
        records.append(record)

    return records


class SettingsAPIClient:
    """Клиент админского REST API.

    Сначала запрашивает enhanced endpoint (с поисковыми метаданными),
    при недоступности переходит на базовый.

    Attributes:
        base_url: Базовый URL API (``http://host/api``).
        timeout: Таймаут запроса в секундах.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        if token:
            self._session.headers.update({"Authorization": f"Bearer {token}"})

    def _get_json(self, endpoint: str) -> Any:
        url = f"{self.base_url}{endpoint}"
        logger.debug("Requesting settings", url=url)

        response = self._session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def fetch_settings(self) -> list[SettingRecord]:
        """Загружает корпус настроек.

        Returns:
            Список SettingRecord.

        Raises:
            SettingsSourceError: Оба endpoint'а недоступны или вернули мусор.
        """
        try:
            payload = self._get_json(ENHANCED_ENDPOINT)
            records = parse_settings_payload(payload)
            logger.info("Loaded enhanced settings", count=len(records))
            return records
        except (requests.RequestException, ValueError, SettingsSourceError) as e:
            logger.warning(
                "Enhanced settings unavailable, falling back to basic endpoint",
                error_type=type(e).__name__,
                error=str(e),
            )

        try:
            payload = self._get_json(BASIC_ENDPOINT)
            records = parse_settings_payload(payload)
        except (requests.RequestException, ValueError) as e:
            raise SettingsSourceError(f"Failed to load settings from {self.base_url}: {e}") from e

        logger.info("Loaded basic settings", count=len(records))
        return records

    def close(self) -> None:
        self._session.close()
