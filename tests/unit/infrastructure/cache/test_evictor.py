import pytest

from workcache.domain.models.common import GENERAL, WORKITEMS
from workcache.infrastructure.cache.evictor import Evictor

PAYLOAD = "x" * 100  # stored as 102 bytes of JSON


@pytest.mark.asyncio
async def test_under_budget_evicts_nothing(store):
    await store.write("a", GENERAL, PAYLOAD)
    assert await Evictor(store, max_size=1000).enforce_size() == 0
    assert await store.read("a", GENERAL) == PAYLOAD


@pytest.mark.asyncio
async def test_oldest_entry_goes_first(store, clock):
    for key in ("a", "b", "c"):
        await store.write(key, GENERAL, PAYLOAD)
        clock.advance(1)

    evicted = await Evictor(store, max_size=250).enforce_size()

    assert evicted == 1
    assert await store.read("a", GENERAL) is None
    assert await store.read("b", GENERAL) == PAYLOAD
    assert await store.read("c", GENERAL) == PAYLOAD


@pytest.mark.asyncio
async def test_newest_entry_survives_while_older_ones_remain(store, clock):
    for key in ("a", "b", "c"):
        await store.write(key, WORKITEMS, PAYLOAD)
        clock.advance(1)

    await Evictor(store, max_size=110).enforce_size()

    entries = await store.list_entries()
    assert len(entries) == 1
    assert await store.read("c", WORKITEMS) == PAYLOAD


@pytest.mark.asyncio
async def test_eviction_spans_categories(store, clock):
    await store.write("old", WORKITEMS, PAYLOAD)
    clock.advance(1)
    await store.write("new", GENERAL, PAYLOAD)

    await Evictor(store, max_size=150).enforce_size()

    assert await store.read("old", WORKITEMS) is None
    assert await store.read("new", GENERAL) == PAYLOAD


@pytest.mark.asyncio
async def test_zero_budget_empties_the_store(store):
    await store.write("a", GENERAL, PAYLOAD)
    await store.write("b", GENERAL, PAYLOAD)
    assert await Evictor(store, max_size=0).enforce_size() == 2
    assert await store.list_entries() == []


@pytest.mark.asyncio
async def test_failed_removal_is_skipped(store, clock, mocker):
    for key in ("a", "b", "c"):
        await store.write(key, GENERAL, PAYLOAD)
        clock.advance(1)
    original_remove = store.fs.remove
    blocked = store.entry_path("a", GENERAL)

    async def flaky_remove(path):
        if path == blocked:
            raise PermissionError("read-only")
        await original_remove(path)

    mocker.patch.object(store.fs, "remove", side_effect=flaky_remove)

    evicted = await Evictor(store, max_size=250).enforce_size()

    assert evicted == 1
    assert await store.read("a", GENERAL) == PAYLOAD
    assert await store.read("b", GENERAL) is None


@pytest.mark.asyncio
async def test_listing_failure_is_logged_not_raised(store, mocker):
    mocker.patch.object(store, "list_entries", side_effect=OSError("disk gone"))
    assert await Evictor(store, max_size=0).enforce_size() == 0


def test_negative_budget_is_rejected():
    with pytest.raises(ValueError):
        Evictor(store=None, max_size=-1)
