"""UI компоненты CLI.

Модули:
    renderers
        Rich-рендереры результатов, истории и аналитики.
"""
