"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), runs them against the
CacheManager and reports results and failures through the UserInterface.
"""

import logging
from typing import Optional

# Core Imports
from workcache.core.cache_manager import CacheManager

# Domain Layer Imports
from workcache.domain.interfaces.user_interface import UserInterface
from workcache.domain.models.common import GENERAL, WORKITEMS, CacheKey, Category

logger = logging.getLogger(__name__)


class CommandHandler:
    """Handles incoming maintenance commands and delegates to the cache manager."""

    def __init__(self, cache_manager: CacheManager, ui: UserInterface):
        self.cache_manager = cache_manager
        self.ui = ui

    async def handle_stats(self) -> None:
        """Handles the 'stats' command."""
        logger.info("Handling 'stats' command.")
        try:
            await self.cache_manager.init()
            stats = await self.cache_manager.get_stats()
            self.ui.display_stats(stats)
        except Exception as e:
            logger.error(f"Error during stats: {e}", exc_info=True)
            self.ui.display_error(f"Failed to read cache statistics: {e}")
        finally:
            await self._close()

    async def handle_clear(self, assume_yes: bool = False) -> None:
        """Handles the 'clear' command, asking for confirmation unless told not to."""
        logger.info(f"Handling 'clear' command for {self.cache_manager.cache_dir}")
        if not assume_yes and not self.ui.confirm(f"Remove every entry under {self.cache_manager.cache_dir}?"):
            self.ui.display_info("Clear cancelled.")
            return
        try:
            await self.cache_manager.clear()
            self.ui.display_info(f"Cache cleared: {self.cache_manager.cache_dir}")
        except Exception as e:
            logger.error(f"Error during cache clear: {e}", exc_info=True)
            self.ui.display_error(f"Failed to clear cache: {e}")
        finally:
            await self._close()

    async def handle_get(self, key: str, category: Category = GENERAL) -> None:
        """Handles the 'get' command: shows one cached value."""
        logger.info(f"Handling 'get' command for {category}:{key}")
        try:
            await self.cache_manager.init()
            value = await self.cache_manager.get(CacheKey(key), category)
            if value is None:
                self.ui.display_warning(f"No live entry for '{key}' in '{category}'.")
            else:
                self.ui.display_output(value, title=f"{category}:{key}")
        except Exception as e:
            logger.error(f"Error reading {category}:{key}: {e}", exc_info=True)
            self.ui.display_error(f"Failed to read '{key}': {e}")
        finally:
            await self._close()

    async def handle_prune(self) -> None:
        """Handles the 'prune' command: drops expired entries, then enforces the size bound."""
        logger.info("Handling 'prune' command.")
        try:
            await self.cache_manager.init()
            expired = await self.cache_manager.prune_expired()
            evicted = await self.cache_manager.enforce_size()
            self.ui.display_info(f"Removed {expired} expired and {evicted} evicted entries.")
        except Exception as e:
            logger.error(f"Error during prune: {e}", exc_info=True)
            self.ui.display_error(f"Failed to prune cache: {e}")
        finally:
            await self._close()

    async def handle_pending(self, key: str, category: Optional[Category] = None) -> None:
        """Handles the 'pending' command: lists related keys that a hit on ``key`` would mark for preload."""
        category = category or WORKITEMS
        logger.info(f"Handling 'pending' command around {category}:{key}")
        try:
            await self.cache_manager.init()
            if self.cache_manager.trigger_preload(CacheKey(key), category):
                await self.cache_manager.wait_for_preloads()
            keys = self.cache_manager.pending_preloads(category)
            self.ui.display_keys(f"Pending {category} preloads", list(keys))
        except Exception as e:
            logger.error(f"Error listing pending preloads: {e}", exc_info=True)
            self.ui.display_error(f"Failed to list pending preloads: {e}")
        finally:
            await self._close()

    async def _close(self) -> None:
        try:
            await self.cache_manager.close()
        except Exception as e:
            logger.error(f"Error closing cache manager: {e}", exc_info=True)
            self.ui.display_error(f"Failed to save cache metadata: {e}")
