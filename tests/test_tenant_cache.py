"""
租户缓存测试
"""

from unittest.mock import AsyncMock

import pytest

from kriya.database.engine import DemoDataSource
from kriya.domain.storefront import StoreRecord
from kriya.tenancy.cache import TenantCache, database_store_loader
from kriya.tenancy.resolver import StoreIdentifier
from tests.conftest import create_store


def _record(slug: str = "acme") -> StoreRecord:
    return StoreRecord(id=f"id-{slug}", owner_id="owner-1", slug=slug, name=slug.title())


class TestTenantCache:
    """缓存命中 / 过期 / 失效"""

    async def test_hit_within_ttl(self, clock):
        loader = AsyncMock(return_value=_record())
        cache = TenantCache(loader, ttl_seconds=60, clock=clock)

        first = await cache.resolve(StoreIdentifier.slug("acme"))
        clock.advance(30)
        second = await cache.resolve(StoreIdentifier.slug("acme"))

        assert first == second
        assert loader.await_count == 1

    async def test_expires_after_ttl(self, clock):
        loader = AsyncMock(return_value=_record())
        cache = TenantCache(loader, ttl_seconds=60, clock=clock)

        await cache.resolve(StoreIdentifier.slug("acme"))
        clock.advance(61)
        await cache.resolve(StoreIdentifier.slug("acme"))

        assert loader.await_count == 2

    async def test_demo_bypasses_loader(self, clock):
        loader = AsyncMock(return_value=_record())
        cache = TenantCache(loader, clock=clock)

        assert await cache.resolve(StoreIdentifier.demo()) is None
        loader.assert_not_awaited()

    async def test_not_found_is_cached(self, clock):
        loader = AsyncMock(return_value=None)
        cache = TenantCache(loader, clock=clock)

        assert await cache.resolve(StoreIdentifier.slug("ghost")) is None
        assert await cache.resolve(StoreIdentifier.slug("ghost")) is None
        assert loader.await_count == 1

    async def test_loader_error_is_not_cached(self, clock):
        loader = AsyncMock(side_effect=[RuntimeError("db down"), _record()])
        cache = TenantCache(loader, clock=clock)

        assert await cache.resolve(StoreIdentifier.slug("acme")) is None
        store = await cache.resolve(StoreIdentifier.slug("acme"))

        assert store is not None
        assert store.slug == "acme"
        assert loader.await_count == 2

    async def test_slug_and_domain_are_separate_keys(self, clock):
        loader = AsyncMock(return_value=_record())
        cache = TenantCache(loader, clock=clock)

        await cache.resolve(StoreIdentifier.slug("acme"))
        await cache.resolve(StoreIdentifier.domain("acme"))

        assert loader.await_count == 2

    async def test_invalidate_single_entry(self, clock):
        loader = AsyncMock(side_effect=lambda identifier: _record(identifier.value))
        cache = TenantCache(loader, clock=clock)

        await cache.resolve(StoreIdentifier.slug("acme"))
        await cache.resolve(StoreIdentifier.slug("other"))
        cache.invalidate(slug="acme")
        await cache.resolve(StoreIdentifier.slug("acme"))
        await cache.resolve(StoreIdentifier.slug("other"))

        assert loader.await_count == 3

    async def test_invalidate_domain(self, clock):
        loader = AsyncMock(return_value=_record())
        cache = TenantCache(loader, clock=clock)

        await cache.resolve(StoreIdentifier.domain("shop.example.com"))
        cache.invalidate(domain="shop.example.com")
        await cache.resolve(StoreIdentifier.domain("shop.example.com"))

        assert loader.await_count == 2

    async def test_invalidate_all(self, clock):
        loader = AsyncMock(side_effect=lambda identifier: _record(identifier.value))
        cache = TenantCache(loader, clock=clock)

        await cache.resolve(StoreIdentifier.slug("acme"))
        await cache.resolve(StoreIdentifier.slug("other"))
        cache.invalidate()
        await cache.resolve(StoreIdentifier.slug("acme"))
        await cache.resolve(StoreIdentifier.slug("other"))

        assert loader.await_count == 4


class TestDatabaseStoreLoader:
    """按 slug / 域名查库"""

    async def test_load_by_slug(self, data_source):
        created = await create_store(data_source, slug="acme")
        load = database_store_loader(data_source)

        store = await load(StoreIdentifier.slug("acme"))

        assert store is not None
        assert store.id == created.id

    async def test_load_by_custom_domain(self, data_source):
        created = await create_store(data_source, slug="acme", custom_domain="shop.example.com")
        load = database_store_loader(data_source)

        store = await load(StoreIdentifier.domain("shop.example.com"))

        assert store is not None
        assert store.id == created.id

    async def test_inactive_store_not_found(self, data_source):
        await create_store(data_source, slug="closed", is_active=False)
        load = database_store_loader(data_source)

        assert await load(StoreIdentifier.slug("closed")) is None

    async def test_unknown_slug(self, data_source):
        load = database_store_loader(data_source)
        assert await load(StoreIdentifier.slug("nobody")) is None

    async def test_demo_data_source_returns_none(self):
        load = database_store_loader(DemoDataSource())
        assert await load(StoreIdentifier.slug("acme")) is None


@pytest.mark.parametrize("ttl", [0.5, 60])
async def test_boundary_is_expired(clock, ttl):
    loader = AsyncMock(return_value=_record())
    cache = TenantCache(loader, ttl_seconds=ttl, clock=clock)

    await cache.resolve(StoreIdentifier.slug("acme"))
    clock.advance(ttl)
    await cache.resolve(StoreIdentifier.slug("acme"))

    assert loader.await_count == 2
