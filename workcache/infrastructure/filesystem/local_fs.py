"""Concrete implementation of the FileSystem interface for the local disk.

Uses `aiofiles` for non-blocking reads and writes and `aiofiles.os` for
the metadata calls, so the event loop is never blocked on disk I/O.
"""

import asyncio
import logging
import shutil
from pathlib import Path
from typing import List

import aiofiles
import aiofiles.os

# Domain Layer Imports
from workcache.domain.interfaces.filesystem import FileSystem, PathLike
from workcache.domain.models.common import FileStat

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


class LocalFileSystem(FileSystem):
    """Implementation of FileSystem for the local disk."""

    def __init__(self):
        """Initializes the LocalFileSystem adapter."""
        logger.debug("LocalFileSystem initialized.")

    async def read_text(self, path: PathLike) -> str:
        """Reads file content asynchronously using aiofiles."""
        path = Path(path)
        async with aiofiles.open(path, mode='r', encoding='utf-8') as f:
            content = await f.read()
        logger.debug(f"Read {len(content)} characters from {path}")
        return content

    async def write_text(self, path: PathLike, content: str) -> None:
        """Writes content through a temp file and an atomic replace."""
        path = Path(path)
        temp_path = path.with_name(path.name + TEMP_SUFFIX)
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        try:
            async with aiofiles.open(temp_path, mode='w', encoding='utf-8') as f:
                await f.write(content)
            # os.replace is atomic on both Windows and Unix
            await aiofiles.os.replace(temp_path, path)
        except OSError as e:
            logger.error(f"Failed to write file {path}: {e}")
            try:
                await aiofiles.os.remove(temp_path)
            except OSError:
                pass  # Temp file may never have been created
            raise
        logger.debug(f"Wrote {len(content)} characters to {path}")

    async def stat(self, path: PathLike) -> FileStat:
        st = await aiofiles.os.stat(Path(path))
        return FileStat(size=st.st_size, mtime=st.st_mtime)

    async def exists(self, path: PathLike) -> bool:
        return await aiofiles.os.path.exists(Path(path))

    async def remove(self, path: PathLike) -> None:
        await aiofiles.os.remove(Path(path))
        logger.debug(f"Removed file {path}")

    async def list_dir(self, path: PathLike) -> List[str]:
        return await aiofiles.os.listdir(Path(path))

    async def make_dirs(self, path: PathLike) -> None:
        await aiofiles.os.makedirs(Path(path), exist_ok=True)

    async def remove_tree(self, path: PathLike) -> None:
        """Removes a directory tree in a worker thread (like `rm -rf`)."""
        # Run synchronous rmtree in a thread to avoid blocking event loop
        await asyncio.to_thread(shutil.rmtree, Path(path), ignore_errors=True)
        logger.debug(f"Removed directory tree {path}")
