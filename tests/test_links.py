import asyncio

import pytest

from app.services.links import LinkRegistry
from app.utils.exceptions import HandleNotFound


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.mark.asyncio
async def test_register_then_resolve():
    registry = LinkRegistry(ttl_seconds=300)
    handle = await registry.register("https://cdn.example/v.mp4", "Title.mp4")
    entry = await registry.resolve(handle)
    assert (entry.media_url, entry.filename) == ("https://cdn.example/v.mp4", "Title.mp4")
    assert entry.handle == handle
    # TTL policy: still resolvable
    assert (await registry.resolve(handle)).filename == "Title.mp4"


@pytest.mark.asyncio
async def test_resolve_after_ttl():
    clock = FakeClock()
    registry = LinkRegistry(ttl_seconds=300, clock=clock)
    handle = await registry.register("https://cdn.example/v.mp4", "Title.mp4")

    clock.now += 299
    await registry.resolve(handle)

    clock.now += 1
    with pytest.raises(HandleNotFound):
        await registry.resolve(handle)
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_unknown_handle():
    registry = LinkRegistry()
    with pytest.raises(HandleNotFound):
        await registry.resolve("nope")


@pytest.mark.asyncio
async def test_single_use():
    registry = LinkRegistry(single_use=True)
    handle = await registry.register("https://cdn.example/v.mp4", "Title.mp4")
    await registry.resolve(handle)
    with pytest.raises(HandleNotFound):
        await registry.resolve(handle)


@pytest.mark.asyncio
async def test_evict():
    registry = LinkRegistry()
    handle = await registry.register("https://cdn.example/v.mp4", "Title.mp4")
    assert await registry.evict(handle)
    assert not await registry.evict(handle)
    with pytest.raises(HandleNotFound):
        await registry.resolve(handle)


@pytest.mark.asyncio
async def test_purge_expired():
    clock = FakeClock()
    registry = LinkRegistry(ttl_seconds=10, clock=clock)
    old = await registry.register("https://cdn.example/1", "1.mp4")
    clock.now += 5
    fresh = await registry.register("https://cdn.example/2", "2.mp4")
    clock.now += 6

    assert await registry.purge_expired() == 1
    assert len(registry) == 1
    with pytest.raises(HandleNotFound):
        await registry.resolve(old)
    await registry.resolve(fresh)


@pytest.mark.asyncio
async def test_sweeper_runs_in_background():
    clock = FakeClock()
    registry = LinkRegistry(ttl_seconds=1, clock=clock)
    await registry.register("https://cdn.example/1", "1.mp4")
    clock.now += 2

    registry.start(interval=0.01)
    for _ in range(100):
        if len(registry) == 0:
            break
        await asyncio.sleep(0.01)
    await registry.stop()

    assert len(registry) == 0


@pytest.mark.asyncio
async def test_concurrent_registrations_are_unique():
    registry = LinkRegistry()
    handles = await asyncio.gather(*(
        registry.register(f"https://cdn.example/{i}", f"{i}.mp4") for i in range(10000)
    ))
    assert len(set(handles)) == 10000
    assert len(registry) == 10000


@pytest.mark.asyncio
async def test_resolve_racing_eviction():
    registry = LinkRegistry()
    handle = await registry.register("https://cdn.example/v.mp4", "Title.mp4")

    async def resolve():
        try:
            return await registry.resolve(handle)
        except HandleNotFound:
            return None

    results = await asyncio.gather(registry.evict(handle), resolve(), resolve())
    for entry in results[1:]:
        assert entry is None or entry.media_url == "https://cdn.example/v.mp4"
    assert results[0] is True
