"""
Tests for the TTL cache backend.
"""

import asyncio


class FakeMonotonic:
    def __init__(self):
        self.value = 1000.0

    def __call__(self):
        return self.value


class TestInMemoryCache:
    """Values live for their TTL and no longer."""

    def test_get_returns_value_before_expiry(self):
        from core.cache import InMemoryCache
        clock = FakeMonotonic()
        cache = InMemoryCache(clock=clock)

        async def run():
            await cache.set("k", {"a": 1}, ttl_seconds=10)
            clock.value += 9.9
            return await cache.get("k")

        assert asyncio.run(run()) == {"a": 1}

    def test_entry_expires_at_ttl(self):
        from core.cache import InMemoryCache
        clock = FakeMonotonic()
        cache = InMemoryCache(clock=clock)

        async def run():
            await cache.set("k", "v", ttl_seconds=10)
            clock.value += 10
            return await cache.get("k")

        assert asyncio.run(run()) is None
        assert len(cache) == 0

    def test_zero_ttl_is_not_stored(self):
        from core.cache import InMemoryCache
        cache = InMemoryCache()

        async def run():
            stored = await cache.set("k", "v", ttl_seconds=0)
            return stored, await cache.get("k")

        assert asyncio.run(run()) == (False, None)

    def test_missing_key_is_none(self):
        from core.cache import InMemoryCache
        assert asyncio.run(InMemoryCache().get("nope")) is None

    def test_delete_and_clear(self):
        from core.cache import InMemoryCache
        cache = InMemoryCache()

        async def run():
            await cache.set("a", 1, 60)
            await cache.set("b", 2, 60)
            deleted = await cache.delete("a")
            deleted_again = await cache.delete("a")
            return deleted, deleted_again

        assert asyncio.run(run()) == (True, False)
        assert len(cache) == 1
        cache.clear()
        assert len(cache) == 0
