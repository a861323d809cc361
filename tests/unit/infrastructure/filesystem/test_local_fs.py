import os

import pytest

from workcache.infrastructure.filesystem.local_fs import LocalFileSystem


@pytest.fixture
def local_fs():
    return LocalFileSystem()


@pytest.mark.asyncio
async def test_write_creates_parents_and_reads_back(local_fs, tmp_path):
    path = tmp_path / "workitems" / "abc.json"
    await local_fs.write_text(path, '{"id": 1}')
    assert await local_fs.read_text(path) == '{"id": 1}'
    assert not (tmp_path / "workitems" / "abc.json.tmp").exists()


@pytest.mark.asyncio
async def test_write_replaces_existing_content(local_fs, tmp_path):
    path = tmp_path / "entry.json"
    await local_fs.write_text(path, "old")
    await local_fs.write_text(path, "new")
    assert path.read_text(encoding="utf-8") == "new"


@pytest.mark.asyncio
async def test_stat_reports_size_and_mtime(local_fs, tmp_path):
    path = tmp_path / "entry.json"
    path.write_text("12345", encoding="utf-8")
    os.utime(path, (1_000_000, 1_000_000))
    stat = await local_fs.stat(path)
    assert stat.size == 5
    assert stat.mtime == 1_000_000


@pytest.mark.asyncio
async def test_missing_file_raises_file_not_found(local_fs, tmp_path):
    with pytest.raises(FileNotFoundError):
        await local_fs.read_text(tmp_path / "missing")
    with pytest.raises(FileNotFoundError):
        await local_fs.stat(tmp_path / "missing")
    with pytest.raises(FileNotFoundError):
        await local_fs.remove(tmp_path / "missing")


@pytest.mark.asyncio
async def test_list_dir_make_dirs_and_remove(local_fs, tmp_path):
    await local_fs.make_dirs(tmp_path / "a" / "b")
    await local_fs.write_text(tmp_path / "a" / "one.json", "1")
    assert sorted(await local_fs.list_dir(tmp_path / "a")) == ["b", "one.json"]

    await local_fs.remove(tmp_path / "a" / "one.json")
    assert not await local_fs.exists(tmp_path / "a" / "one.json")
    assert await local_fs.exists(tmp_path / "a" / "b")


@pytest.mark.asyncio
async def test_remove_tree(local_fs, tmp_path):
    root = tmp_path / "cache"
    await local_fs.write_text(root / "workitems" / "x.json", "{}")
    await local_fs.remove_tree(root)
    assert not root.exists()
    # Removing a missing tree is not an error
    await local_fs.remove_tree(root)
