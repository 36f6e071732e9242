from rich.console import Console

console = Console()

LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}


class AppLogger:
    def __init__(self, config):
        self.config = config

    def _enabled(self, level):
        configured = LEVELS.get(self.config.logging.level.upper(), LEVELS["INFO"])
        return LEVELS[level] >= configured

    def info(self, message):
        if self._enabled("INFO"):
            console.print(message)

    def warning(self, message):
        if self._enabled("WARNING"):
            console.print(f"⚠️  [yellow]WARNING:[/] {message}")

    def error(self, message):
        console.print(f"❌ [bold red]ERROR:[/] {message}")

    def success(self, message):
        if self._enabled("INFO"):
            console.print(f"✅ [green]SUCCESS:[/] {message}")

    def debug(self, message):
        if self._enabled("DEBUG"):
            console.print(f"⚙️  [dim]DEBUG:[/dim] {message}")
