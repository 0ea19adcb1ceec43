"""
店铺管理 API 测试
"""

import pytest
from sqlalchemy import select

from kriya.database.models import Product, Store, SyncLog
from kriya.services.sheet_rows import CATEGORY_RANGE, PRODUCT_RANGE
from tests.conftest import auth_headers, create_store

OWNER = auth_headers("owner-1")
STRANGER = auth_headers("owner-2")


async def _stores(data_source):
    async with data_source.session() as session:
        return list((await session.execute(select(Store))).scalars().all())


class TestCreateStore:
    """创建店铺"""

    async def test_create(self, client, data_source):
        response = await client.post(
            "/api/stores",
            json={"name": "My Store", "slug": "my-store-2", "currencySymbol": "€", "sheetRef": "sheet-1"},
            headers=OWNER,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "my-store-2"
        assert data["owner_id"] == "owner-1"
        assert data["plan"] == "free"
        assert data["theme"] == "neon"
        assert data["currency_symbol"] == "€"
        assert data["google_sheet_id"] == "sheet-1"

    @pytest.mark.parametrize("slug", ["ab", "-abc", "abc-", "My-Store", "my_store", "a" * 64])
    async def test_invalid_slug(self, client, data_source, slug):
        response = await client.post("/api/stores", json={"name": "S", "slug": slug}, headers=OWNER)

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_SLUG"
        assert await _stores(data_source) == []

    async def test_missing_fields(self, client):
        response = await client.post("/api/stores", json={"slug": "acme"}, headers=OWNER)

        assert response.status_code == 400
        assert response.json()["error"] == "Name and slug are required"

    async def test_duplicate_slug(self, client, data_source):
        await create_store(data_source, slug="acme", owner_id="owner-2")

        response = await client.post("/api/stores", json={"name": "Acme", "slug": "acme"}, headers=OWNER)

        assert response.status_code == 409
        assert response.json()["code"] == "SLUG_TAKEN"

    async def test_free_plan_limit(self, client, data_source):
        first = await client.post("/api/stores", json={"name": "One", "slug": "store-one"}, headers=OWNER)
        second = await client.post("/api/stores", json={"name": "Two", "slug": "store-two"}, headers=OWNER)

        assert first.status_code == 201
        assert second.status_code == 403
        assert second.json()["code"] == "PLAN_LIMIT_EXCEEDED"
        assert [s.slug for s in await _stores(data_source)] == ["store-one"]

    async def test_highest_plan_applies(self, client, data_source):
        await create_store(data_source, slug="pro-store", plan="pro")

        response = await client.post("/api/stores", json={"name": "Two", "slug": "store-two"}, headers=OWNER)

        assert response.status_code == 201

    async def test_requires_auth(self, client, data_source):
        response = await client.post("/api/stores", json={"name": "Acme", "slug": "acme"})

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized", "code": "UNAUTHORIZED"}

    async def test_invalid_token(self, client):
        response = await client.get("/api/stores", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"

    async def test_demo_mode_unavailable(self, demo_client):
        response = await demo_client.post("/api/stores", json={"name": "Acme", "slug": "acme"}, headers=OWNER)

        assert response.status_code == 503
        assert response.json()["code"] == "BACKEND_UNAVAILABLE"


class TestReadStores:
    async def test_list_only_own_stores(self, client, data_source):
        await create_store(data_source, slug="mine")
        await create_store(data_source, slug="theirs", owner_id="owner-2")

        response = await client.get("/api/stores", headers=OWNER)

        assert response.status_code == 200
        assert [s["slug"] for s in response.json()] == ["mine"]

    async def test_get_foreign_store_is_404(self, client, data_source):
        store = await create_store(data_source, slug="acme")

        response = await client.get(f"/api/stores/{store.id}", headers=STRANGER)

        assert response.status_code == 404
        assert response.json()["error"] == "Store not found or access denied"


class TestUpdateStore:
    """更新店铺设置"""

    async def test_update_settings(self, client, data_source):
        store = await create_store(data_source, slug="acme")

        response = await client.patch(
            f"/api/stores/{store.id}",
            json={"name": "Acme Co", "theme": "brutal", "customDomain": "Shop.Example.com"},
            headers=OWNER,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Acme Co"
        assert data["theme"] == "brutal"
        assert data["custom_domain"] == "shop.example.com"

    async def test_slug_is_immutable(self, client, data_source):
        store = await create_store(data_source, slug="acme")

        response = await client.patch(f"/api/stores/{store.id}", json={"slug": "other"}, headers=OWNER)

        assert response.status_code == 400
        assert [s.slug for s in await _stores(data_source)] == ["acme"]

    async def test_name_cannot_be_null(self, client, data_source):
        store = await create_store(data_source, slug="acme")

        response = await client.patch(f"/api/stores/{store.id}", json={"name": None}, headers=OWNER)

        assert response.status_code == 400

    @pytest.mark.parametrize(
        "domain",
        ["shop.example.com:443", "https://shop.example.com", "shop.example.com/store", "localhost", "-shop.example.com"],
    )
    async def test_domain_must_be_bare_hostname(self, client, data_source, domain):
        store = await create_store(data_source, slug="acme")

        response = await client.patch(f"/api/stores/{store.id}", json={"custom_domain": domain}, headers=OWNER)

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_DOMAIN"
        assert (await _stores(data_source))[0].custom_domain is None

    async def test_domain_trailing_dot_dropped(self, client, data_source):
        store = await create_store(data_source, slug="acme")

        response = await client.patch(
            f"/api/stores/{store.id}",
            json={"custom_domain": " Shop.Example.com. "},
            headers=OWNER,
        )

        assert response.status_code == 200
        assert response.json()["custom_domain"] == "shop.example.com"

    async def test_domain_taken(self, client, data_source):
        await create_store(data_source, slug="other", owner_id="owner-2", custom_domain="shop.example.com")
        store = await create_store(data_source, slug="acme")

        response = await client.patch(
            f"/api/stores/{store.id}",
            json={"custom_domain": "shop.example.com"},
            headers=OWNER,
        )

        assert response.status_code == 409
        assert response.json()["code"] == "DOMAIN_TAKEN"

    async def test_update_invalidates_tenant_cache(self, client, data_source):
        store = await create_store(data_source, slug="acme")

        before = await client.get("/api/store/config", headers={"host": "acme.kriya.store"})
        assert before.json()["name"] == "Acme"

        await client.patch(f"/api/stores/{store.id}", json={"name": "Renamed"}, headers=OWNER)

        after = await client.get("/api/store/config", headers={"host": "acme.kriya.store"})
        assert after.json()["name"] == "Renamed"

    async def test_foreign_store_is_404(self, client, data_source):
        store = await create_store(data_source, slug="acme")

        response = await client.patch(f"/api/stores/{store.id}", json={"name": "Mine now"}, headers=STRANGER)

        assert response.status_code == 404


class TestSyncStore:
    """手动同步"""

    async def test_sync(self, client, data_source, fake_sheets):
        fake_sheets.set_rows("sheet-1", CATEGORY_RANGE, [["c1", "Tees"]])
        fake_sheets.set_rows("sheet-1", PRODUCT_RANGE, [["p1", "Tee", "", "10", "", "", "tees"]])
        store = await create_store(data_source, slug="acme", google_sheet_id="sheet-1")

        response = await client.post(f"/api/stores/{store.id}/sync", headers=OWNER)

        assert response.status_code == 200
        assert response.json() == {"success": True, "productsCount": 1, "categoriesCount": 1}

        logs = await client.get(f"/api/stores/{store.id}/sync-logs", headers=OWNER)
        assert logs.status_code == 200
        assert logs.json()[0]["status"] == "completed"

    async def test_no_sheet(self, client, data_source, fake_sheets):
        store = await create_store(data_source, slug="acme")

        response = await client.post(f"/api/stores/{store.id}/sync", headers=OWNER)

        assert response.status_code == 400
        assert response.json()["code"] == "NO_SHEET_CONFIGURED"
        assert fake_sheets.requests == []

    async def test_sync_failure(self, client, data_source, fake_sheets):
        fake_sheets.status_code = 503
        store = await create_store(data_source, slug="acme", google_sheet_id="sheet-1")

        response = await client.post(f"/api/stores/{store.id}/sync", headers=OWNER)

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "SYNC_FAILED"
        assert body["retryable"] is True

    async def test_foreign_store_no_writes(self, client, data_source, fake_sheets):
        fake_sheets.set_rows("sheet-1", PRODUCT_RANGE, [["p1", "Tee", "", "10"]])
        store = await create_store(data_source, slug="acme", google_sheet_id="sheet-1")

        response = await client.post(f"/api/stores/{store.id}/sync", headers=STRANGER)

        assert response.status_code == 404
        assert fake_sheets.requests == []
        async with data_source.session() as session:
            assert (await session.execute(select(SyncLog))).scalars().all() == []
            assert (await session.execute(select(Product))).scalars().all() == []

    async def test_requires_auth(self, client, data_source):
        store = await create_store(data_source, slug="acme", google_sheet_id="sheet-1")

        response = await client.post(f"/api/stores/{store.id}/sync")

        assert response.status_code == 401

    async def test_demo_mode(self, demo_client):
        response = await demo_client.post("/api/stores/some-id/sync", headers=OWNER)

        assert response.status_code == 503
