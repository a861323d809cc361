"""Interface for interacting with the file system.

Defines the contract for the handful of file operations the cache needs,
allowing the cache to run against the local disk or an in-memory tree
(e.g. in tests with a fake clock).
"""

import abc
from pathlib import Path
from typing import List, Union

# Import relevant domain models
from ..models.common import FileStat

PathLike = Union[str, Path]


class FileSystem(abc.ABC):
    """Abstract Base Class for file system operations."""

    @abc.abstractmethod
    async def read_text(self, path: PathLike) -> str:
        """Reads the entire content of a file asynchronously.

        Raises:
            FileNotFoundError: If the file does not exist.
            PermissionError: If read permissions are denied.
        """
        pass

    @abc.abstractmethod
    async def write_text(self, path: PathLike, content: str) -> None:
        """Writes content to a file, replacing it atomically if it exists.

        Parent directories are created as needed.

        Raises:
            PermissionError: If write permissions are denied.
            OSError: For other file system errors (e.g. disk full).
        """
        pass

    @abc.abstractmethod
    async def stat(self, path: PathLike) -> FileStat:
        """Returns size and modification time of a file.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        pass

    @abc.abstractmethod
    async def exists(self, path: PathLike) -> bool:
        """Checks if a file or directory exists."""
        pass

    @abc.abstractmethod
    async def remove(self, path: PathLike) -> None:
        """Removes a single file.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        pass

    @abc.abstractmethod
    async def list_dir(self, path: PathLike) -> List[str]:
        """Lists the entry names directly inside a directory.

        Raises:
            FileNotFoundError: If the directory does not exist.
        """
        pass

    @abc.abstractmethod
    async def make_dirs(self, path: PathLike) -> None:
        """Creates a directory and any missing parents. No-op if it exists."""
        pass

    @abc.abstractmethod
    async def remove_tree(self, path: PathLike) -> None:
        """Recursively removes a directory. Missing directories are ignored."""
        pass
