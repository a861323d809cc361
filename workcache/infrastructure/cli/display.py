"""Console output for the maintenance CLI, rendered with rich."""

import json
import logging
from datetime import datetime
from typing import Any, List, Optional

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from workcache.domain.interfaces.user_interface import UserInterface
from workcache.domain.models.cache import CacheStats

logger = logging.getLogger(__name__)


def _format_time(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        """Initializes the rich Console (a custom one can be injected, e.g. for tests)."""
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_output(self, output: Any, **kwargs: Any) -> None:
        """Displays a cached value as highlighted JSON inside a panel.

        Args:
            output: The value to display.
            **kwargs: ``title`` for the panel header.
        """
        title = kwargs.get("title", "Cached value")
        rendered = json.dumps(output, indent=2, ensure_ascii=False, default=str)
        panel = Panel(
            Syntax(rendered, "json", word_wrap=True),
            title=f"[bold cyan]{title}[/bold cyan]",
            border_style="cyan",
            box=ROUNDED,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_stats(self, stats: CacheStats) -> None:
        """Displays a statistics snapshot as a two-column table."""
        table = Table(show_header=False, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("Metric", style="bold cyan")
        table.add_column("Value", style="white")

        table.add_row("Entries", str(stats.total_files))
        table.add_row("Size", f"{stats.total_size_mb:.2f} MB ({stats.total_size} bytes)")
        table.add_row("Utilization", f"{stats.utilization_percent}% of {stats.max_size} bytes")
        if stats.oldest_file is not None:
            table.add_row("Oldest entry", f"{_format_time(stats.oldest_file.mtime)}  {stats.oldest_file.path}")
        if stats.newest_file is not None:
            table.add_row("Newest entry", f"{_format_time(stats.newest_file.mtime)}  {stats.newest_file.path}")
        table.add_row("Hits / misses", f"{stats.hits} / {stats.misses} ({stats.hit_rate:.2f}%)")
        table.add_row("Pending preloads", str(stats.pending_preloads))

        self.console.print(Panel(table, title="[bold white]Cache statistics[/bold white]", border_style="cyan", box=SIMPLE))

    def display_keys(self, title: str, keys: List[str]) -> None:
        """Displays keys one per line, or a note when there are none."""
        if not keys:
            self.display_info(f"{title}: none")
            return
        table = Table(show_header=True, box=SIMPLE, border_style="cyan", padding=(0, 1))
        table.add_column(title, style="white")
        for key in keys:
            table.add_row(key)
        self.console.print(table)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The error message to display.
        """
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message.

        Args:
            info_message: The informational message to display.
        """
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message.

        Args:
            warning_message: The warning message to display.
        """
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def confirm(self, question: str) -> bool:
        """Asks a yes/no question and returns the answer."""
        logger.debug(f"Asking yes/no question: {question}")
        self.console.print(Panel(
            Text(f"{question} (y/n)", style="white"),
            title="[bold yellow]Question[/bold yellow]",
            border_style="yellow",
            box=ROUNDED,
            padding=(0, 1)
        ))
        response = self.console.input("[bold yellow]> [/bold yellow]").strip().lower()
        return response in ('y', 'yes')
