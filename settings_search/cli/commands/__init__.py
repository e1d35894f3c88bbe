"""CLI команды.

Модули:
    search_cmd
        Поиск по настройкам.
    categories_cmd
        Список категорий.
    history_cmd
        История, популярные запросы, подсказки, экспорт/импорт.
    config_cmd
        Просмотр конфигурации.
"""
