from rich.console import Console
from rich.theme import Theme

THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "error": "bold red",
        "muted": "dim",
    }
)

main_console = Console(theme=THEME, highlight=False)
