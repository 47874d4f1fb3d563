"""Rich console rendering of cached values, replies, key listings and messages."""

import logging
from typing import Any, List, Optional

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from reactivecache.domain.interfaces.user_interface import UserInterface
from reactivecache.domain.models.reply import Reply

logger = logging.getLogger(__name__)


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_output(self, output: Any, **kwargs: Any) -> None:
        """Displays a cached value; Reply objects are shown with their provenance.

        Args:
            output: The value or Reply to display.
            **kwargs: title - panel title (default: "Value").
        """
        title = kwargs.get("title", "Value")
        if isinstance(output, Reply):
            table = Table(box=ROUNDED, show_header=False, title=title)
            table.add_column("field", style="bold cyan")
            table.add_column("value")
            table.add_row("data", str(output.data))
            table.add_row("source", output.source.value)
            table.add_row("from cache", "yes" if output.from_cache else "no")
            table.add_row("stale", "yes" if output.stale else "no")
            table.add_row("encrypted", "yes" if output.encrypted else "no")
            self.console.print(table)
            return
        logger.debug(f"display_output called: title={title}, type={type(output).__name__}")
        # Values are printed raw so the command stays scriptable
        self.console.print(Text(str(output)))

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style."""
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_keys(self, keys: List[str], **kwargs: Any) -> None:
        if not keys:
            self.display_info("No cached keys.")
            return
        table = Table(box=ROUNDED, title=kwargs.get("title", "Cached keys"))
        table.add_column("#", justify="right", style="dim")
        table.add_column("key", style="bold")
        for index, key in enumerate(sorted(keys), start=1):
            table.add_row(str(index), key)
        self.console.print(table)
