"""Console output for CLI commands.

All progress output goes to stderr; stdout is reserved for command data
(URLs, query results, dumps).
"""

from collections.abc import Callable
from functools import wraps

import typer
from loguru import logger
from rich.console import Console, ConsoleRenderable
from rich.panel import Panel
from rich.text import Text

from pglaunch.infra.errors import LaunchError


class CLIConsole:
    """Rich console wrapper for consistent CLI output."""

    def __init__(self, quiet: bool = False) -> None:
        """Initialize the CLI console.

        Args:
            quiet: Suppress everything except errors
        """
        self.console = Console(stderr=True)
        self.quiet = quiet

    def print(self, msg: ConsoleRenderable | str | None = None) -> None:
        if not self.quiet:
            self.console.print(msg)

    def info(self, msg: str) -> None:
        self.print(f"[cyan]ℹ[/cyan]  {msg}")

    def ok(self, msg: str) -> None:
        self.print(f"[green]✅[/green] {msg}")

    def warn(self, msg: str) -> None:
        self.print(f"[yellow]⚠️[/yellow]  {msg}")

    def error(self, msg: str) -> None:
        self.console.print(f"[red]❌[/red] {msg}")

    def detail(self, line: str) -> None:
        """Print one line of tool output, indented and without markup."""
        self.print(Text(f"    {line}", style="dim"))

    def handle_error(
        self, message: str, details: str | None = None, exit_code: int = 1
    ) -> None:
        """Handle an error by printing a message and exiting.

        Args:
            message: Error message to display
            details: Optional additional details
            exit_code: Exit code to use
        """
        self.error(f"[bold red]{message}[/bold red]")
        if details:
            self.console.print(
                Panel(Text(details), title="Details", border_style="red")
            )
        raise typer.Exit(exit_code)


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Decorator to wrap command functions with standard error handling.

    Infrastructure errors become a formatted message and their exit code.

    Args:
        func: The command function to wrap

    Returns:
        Wrapped function with error handling
    """

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except LaunchError as e:
            logger.debug(f"{type(e).__name__}: {e.message}")
            console.handle_error(e.message, e.details, e.exit_code)
        except KeyboardInterrupt:
            console.error("Operation cancelled by user.")
            raise typer.Exit(130) from None

    return wrapper


# Shared console instance for consistent output
console = CLIConsole()
