"""Main entry point for the workcache maintenance CLI.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Coroutine, Dict, Optional

import typer
from typing_extensions import Annotated

# --- Core Layer ---
from workcache.core.command_handler import CommandHandler

# --- Domain Layer ---
from workcache.domain.models.common import GENERAL, WORKITEMS

# --- Infrastructure Layer ---
# Config
from workcache.infrastructure.config.settings import load_cache_settings
# UI
from workcache.infrastructure.cli.display import ConsoleDisplay
# Monitoring
from workcache.infrastructure.monitoring.logger_setup import setup_logging

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

def create_dependencies(cache_dir: Optional[Path] = None) -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root.
    """
    dependencies: Dict[str, Any] = {}
    try:
        # 1. Load Configuration First
        settings = load_cache_settings(cache_dir)
        setup_logging(log_level=settings.log_level, log_file=settings.log_file)
        logger.info("Configuration and logging initialized.")

        # 2. Instantiate Infrastructure Adapters & Services
        dependencies['ui'] = ConsoleDisplay()
        dependencies['settings'] = settings
        dependencies['cache_manager'] = settings.create_manager()

        # 3. Instantiate Command Handler
        dependencies['command_handler'] = CommandHandler(
            cache_manager=dependencies['cache_manager'],
            ui=dependencies['ui'],
        )
        logger.debug("All dependencies initialized successfully.")
        return dependencies

    except Exception as e:
        logger.error(f"Fatal Error during application initialization: {e}", exc_info=True)
        if 'ui' in dependencies:
            dependencies['ui'].display_error(f"Application Initialization Failed: {e}")
        else:
            print(f"FATAL ERROR during initialization: {e}", file=sys.stderr)
        raise typer.Exit(code=1)

# Holds the single instances of our services once the callback has run
_dependencies: Dict[str, Any] = {}

# --- Typer App Definition ---
app = typer.Typer(
    name="workcache",
    help="workcache: inspect and maintain the local work-item cache.",
    add_completion=False,
)

# --- Helper for Running Async Commands ---
def run_async(coro: Coroutine[Any, Any, None]) -> None:
    """Manages running async functions from sync Typer commands."""
    try:
        asyncio.run(coro)
    except Exception as e:
        logger.error(f"Error executing async command: {e}", exc_info=True)
        _dependencies['ui'].display_error(f"Command execution failed: {e}")
        raise typer.Exit(code=1)


def _handler() -> CommandHandler:
    return _dependencies['command_handler']

# --- CLI Commands ---

CategoryOption = Annotated[
    str,
    typer.Option("--category", "-c", help="Cache category ('workitems', 'queries', 'general').")
]


@app.command()
def stats():
    """Show entry count, size, age range and hit rate."""
    run_async(_handler().handle_stats())


@app.command()
def clear(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
):
    """Remove every cached entry and the access log."""
    run_async(_handler().handle_clear(assume_yes=yes))


@app.command()
def get(
    key: Annotated[str, typer.Argument(help="Key of the cached value.")],
    category: CategoryOption = GENERAL,
):
    """Show a cached value."""
    run_async(_handler().handle_get(key, category))


@app.command()
def prune():
    """Remove expired entries and enforce the size budget."""
    run_async(_handler().handle_prune())


@app.command()
def pending(
    key: Annotated[str, typer.Argument(help="Work item id to look around.")],
    category: CategoryOption = WORKITEMS,
):
    """List related keys that a hit on KEY would mark for preload."""
    run_async(_handler().handle_pending(key, category))


@app.callback()
def main_callback(
    cache_dir: Annotated[
        Optional[Path],
        typer.Option("--cache-dir", "-d", file_okay=False, help="Cache directory (overrides 'cache.dir').")
    ] = None,
):
    """Wires dependencies before any command runs."""
    _dependencies.clear()
    _dependencies.update(create_dependencies(cache_dir))

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    logger.debug("Starting workcache CLI...")
    app()  # Typer takes over


if __name__ == "__main__":
    cli_entry_point()
