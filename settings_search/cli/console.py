"""Rich Console singleton для CLI.

Attributes:
    console: Глобальный Rich Console.
"""

from rich.console import Console

# Глобальный Console, используется всеми командами
console = Console()


__all__ = ["console"]
