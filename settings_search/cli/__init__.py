"""CLI модуль Settings Search.

Точка входа: ``settings-search`` (см. pyproject.toml).

Example:
    $ settings-search -f settings.json search "2fa"
    $ settings-search history popular
"""

from settings_search.cli.app import app

__all__ = ["app"]
