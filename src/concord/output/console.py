"""Rich console singleton and theme for Concord."""

from rich.console import Console
from rich.theme import Theme

CONCORD_THEME = Theme({
    "backend": "bold blue",
    "status.success": "bold green",
    "status.failed": "bold red",
    "status.throttled": "bold #ff8800",
    "status.cancelled": "bold yellow",
    "status.running": "bold yellow",
    "status.idle": "dim",
    "header": "bold #e94560",
    "tier": "cyan",
    "prompt": "bold white",
})

console = Console(theme=CONCORD_THEME)
error_console = Console(stderr=True, theme=CONCORD_THEME)
