"""Вспомогательные модули (логирование)."""
