"""In-memory implementation of the FileSystem interface.

Modification times come from an injected Clock, which makes TTL expiry and
eviction order deterministic when paired with a fake clock. Useful for
tests and for embedding the cache where no disk state is wanted.
"""

import errno
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set

from workcache.domain.interfaces.clock import Clock
from workcache.domain.interfaces.filesystem import FileSystem, PathLike
from workcache.domain.models.common import FileStat
from workcache.infrastructure.clock import SystemClock

logger = logging.getLogger(__name__)


@dataclass
class _MemoryFile:
    content: str
    mtime: float


def _not_found(path: Path) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, "No such file or directory", str(path))


class MemoryFileSystem(FileSystem):
    """A dictionary-backed file tree."""

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or SystemClock()
        self._files: Dict[Path, _MemoryFile] = {}
        self._dirs: Set[Path] = set()

    def _add_dirs(self, path: Path) -> None:
        for directory in [path, *path.parents]:
            if directory == Path(directory.anchor) or str(directory) == ".":
                break
            self._dirs.add(directory)

    async def read_text(self, path: PathLike) -> str:
        path = Path(path)
        if path in self._dirs:
            raise IsADirectoryError(errno.EISDIR, "Is a directory", str(path))
        entry = self._files.get(path)
        if entry is None:
            raise _not_found(path)
        return entry.content

    async def write_text(self, path: PathLike, content: str) -> None:
        path = Path(path)
        if path in self._dirs:
            raise IsADirectoryError(errno.EISDIR, "Is a directory", str(path))
        self._add_dirs(path.parent)
        self._files[path] = _MemoryFile(content=content, mtime=self._clock.now())

    async def stat(self, path: PathLike) -> FileStat:
        path = Path(path)
        entry = self._files.get(path)
        if entry is None:
            raise _not_found(path)
        return FileStat(size=len(entry.content.encode('utf-8')), mtime=entry.mtime)

    async def exists(self, path: PathLike) -> bool:
        path = Path(path)
        return path in self._files or path in self._dirs

    async def remove(self, path: PathLike) -> None:
        path = Path(path)
        if self._files.pop(path, None) is None:
            raise _not_found(path)

    async def list_dir(self, path: PathLike) -> List[str]:
        path = Path(path)
        if path not in self._dirs:
            raise _not_found(path)
        children = {p.name for p in self._files if p.parent == path}
        children.update(d.name for d in self._dirs if d.parent == path and d != path)
        return sorted(children)

    async def make_dirs(self, path: PathLike) -> None:
        self._add_dirs(Path(path))

    async def remove_tree(self, path: PathLike) -> None:
        path = Path(path)
        self._files = {p: f for p, f in self._files.items() if path not in p.parents}
        self._dirs = {d for d in self._dirs if d != path and path not in d.parents}
        logger.debug(f"Removed in-memory tree {path}")

    def set_mtime(self, path: PathLike, mtime: float) -> None:
        """Overrides the modification time of an existing file (like `touch -d`)."""
        path = Path(path)
        entry = self._files.get(path)
        if entry is None:
            raise _not_found(path)
        entry.mtime = mtime
