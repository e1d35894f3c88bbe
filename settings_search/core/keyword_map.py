"""Таблица ключевых слов для обогащения настроек.

Декларативная таблица "какие понятия ведут к каким настройкам"
компилируется один раз в индекс ``term -> keys`` и ``key -> terms``.

Классы:
    KeywordMapping
        Группа терминов и синонимов для набора настроек.
    KeywordIndex
        Скомпилированный индекс.

Функции:
    enrich_records
        Добавляет термины и синонимы из индекса в метаданные записей.
"""

from dataclasses import dataclass
from typing import Iterable, Sequence

from settings_search.domain.setting import SettingRecord, unique_terms
from settings_search.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class KeywordMapping:
    """Группа понятий, указывающих на настройки.

    Attributes:
        terms: Термины, которые пользователь может ввести.
        target_keys: Ключи настроек, к которым ведут термины.
        synonyms: Дополнительные синонимы для этих настроек.
    """

    terms: tuple[str, ...]
    target_keys: tuple[str, ...]
    synonyms: tuple[str, ...] = ()


DEFAULT_KEYWORD_MAPPINGS: tuple[KeywordMapping, ...] = (
    KeywordMapping(
        terms=("2fa", "two factor", "mfa", "totp", "otp"),
        target_keys=("enable_two_factor_auth",),
        synonyms=("two-step verification", "authenticator", "multi-factor"),
    ),
    KeywordMapping(
        terms=("email", "mail", "smtp"),
        target_keys=("email_notifications_enabled", "smtp_enabled", "admin_email"),
        synonyms=("notifications", "outgoing mail", "mail server"),
    ),
    KeywordMapping(
        terms=("password", "pwd", "auth"),
        target_keys=("password_complexity_rules", "login_attempt_limit"),
        synonyms=("credentials", "login", "sign in"),
    ),
    KeywordMapping(
        terms=("dark", "theme", "mode"),
        target_keys=("enable_dark_mode",),
        synonyms=("night mode", "appearance"),
    ),
    KeywordMapping(
        terms=("social", "share", "follow"),
        target_keys=("enable_social_sharing", "enable_user_follows", "enable_user_messaging"),
        synonyms=("community", "friends", "messages"),
    ),
    KeywordMapping(
        terms=("color", "colour", "brand", "logo"),
        target_keys=("primary_color", "secondary_color", "site_logo_url"),
        synonyms=("branding", "palette", "look and feel"),
    ),
    KeywordMapping(
        terms=("session", "timeout", "logout"),
        target_keys=("session_timeout_minutes",),
        synonyms=("idle", "expire"),
    ),
    KeywordMapping(
        terms=("maintenance", "downtime", "offline"),
        target_keys=("maintenance_mode", "maintenance_message"),
        synonyms=("under construction",),
    ),
    KeywordMapping(
        terms=("currency", "money", "price"),
        target_keys=("currency_code", "currency_symbol"),
        synonyms=("pricing", "exchange"),
    ),
    KeywordMapping(
        terms=("language", "locale", "translation"),
        target_keys=("default_language", "supported_languages"),
        synonyms=("i18n", "localization"),
    ),
    KeywordMapping(
        terms=("webhook", "hook", "callback"),
        target_keys=("enable_webhook_notifications", "webhook_endpoints", "webhook_secret"),
        synonyms=("integration events",),
    ),
    KeywordMapping(
        terms=("rate limit", "throttle", "api limit"),
        target_keys=("api_rate_limit", "login_attempt_limit"),
        synonyms=("requests per minute",),
    ),
    KeywordMapping(
        terms=("retention", "gdpr", "privacy", "export"),
        target_keys=("data_retention_days", "export_user_data_enabled"),
        synonyms=("data protection", "cleanup"),
    ),
    KeywordMapping(
        terms=("analytics", "tracking", "statistics"),
        target_keys=("enable_advanced_analytics",),
        synonyms=("metrics", "reports"),
    ),
    KeywordMapping(
        terms=("submission", "approve", "moderation"),
        target_keys=("auto_approve_whiskies", "whisky_submission_guidelines"),
        synonyms=("review queue",),
    ),
)


class KeywordIndex:
    """Скомпилированная таблица ключевых слов.

    Attributes:
        term_to_keys: Нормализованный термин -> ключи настроек.
        key_terms: Ключ настройки -> термины, ведущие к нему.
        key_synonyms: Ключ настройки -> синонимы.
    """

    def __init__(
        self,
        term_to_keys: dict[str, frozenset[str]],
        key_terms: dict[str, tuple[str, ...]],
        key_synonyms: dict[str, tuple[str, ...]],
    ):
        self.term_to_keys = term_to_keys
        self.key_terms = key_terms
        self.key_synonyms = key_synonyms

    @classmethod
    def compile(cls, mappings: Iterable[KeywordMapping]) -> "KeywordIndex":
        """Строит индекс из таблицы.

        Несколько групп могут указывать на один ключ: их термины и
        синонимы объединяются в порядке таблицы.
        """
        term_to_keys: dict[str, set[str]] = {}
        key_terms: dict[str, list[str]] = {}
        key_synonyms: dict[str, list[str]] = {}

        for mapping in mappings:
            terms = unique_terms(t.lower() for t in mapping.terms)
            for term in terms:
                term_to_keys.setdefault(term, set()).update(mapping.target_keys)
            for key in mapping.target_keys:
                key_terms.setdefault(key, []).extend(terms)
                key_synonyms.setdefault(key, []).extend(mapping.synonyms)

        index = cls(
            term_to_keys={t: frozenset(keys) for t, keys in term_to_keys.items()},
            key_terms={k: unique_terms(v) for k, v in key_terms.items()},
            key_synonyms={k: unique_terms(v) for k, v in key_synonyms.items()},
        )

        logger.debug(
            "Keyword index compiled",
            terms=len(index.term_to_keys),
            keys=len(index.key_terms),
        )
        return index

    def keys_for_term(self, term: str) -> frozenset[str]:
        return self.term_to_keys.get(term.strip().lower(), frozenset())

    def __len__(self) -> int:
        return len(self.term_to_keys)


_default_index: KeywordIndex | None = None


def default_keyword_index() -> KeywordIndex:
    """Индекс по встроенной таблице (компилируется при первом вызове)."""
    global _default_index
    if _default_index is None:
        _default_index = KeywordIndex.compile(DEFAULT_KEYWORD_MAPPINGS)
    return _default_index


def enrich_records(
    records: Sequence[SettingRecord],
    index: KeywordIndex,
) -> list[SettingRecord]:
    """Добавляет термины и синонимы из индекса в поисковые метаданные.

    Чистая функция: входные записи не изменяются, порядок сохраняется.
    Записи без сопоставлений возвращаются как есть.
    """
    enriched: list[SettingRecord] = []
    touched = 0

    for record in records:
        terms = index.key_terms.get(record.key, ())
        synonyms = index.key_synonyms.get(record.key, ())

        if not terms and not synonyms:
            enriched.append(record)
            continue

        search = record.search
        new_search = type(search)(
            title=search.title,
            keywords=unique_terms((*search.keywords, *terms)),
            synonyms=unique_terms((*search.synonyms, *synonyms)),
            weight=search.weight,
        )
        enriched.append(record.with_search(new_search))
        touched += 1

    logger.trace("Records enriched", total=len(records), enriched=touched)
    return enriched
