"""
店铺前台 API 测试
"""

from decimal import Decimal

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from kriya.database.models import Category, Product
from kriya.main import create_app
from kriya.services.demo_data import DEMO_CATEGORIES, DEMO_PRODUCTS, DEMO_STORE_CONFIG
from kriya.services.sheet_rows import PRODUCT_RANGE
from kriya.tenancy.middleware import PATHNAME_HEADER
from tests.conftest import create_store


@pytest_asyncio.fixture
async def acme(data_source):
    """acme 店铺：一个分类、一件商品，绑定自定义域名"""
    store = await create_store(
        data_source,
        slug="acme",
        custom_domain="shop.acme.com",
        tagline="Goods",
        theme="soft",
        currency="EUR",
        currency_symbol="€",
    )
    async with data_source.session() as session:
        tees = Category(store_id=store.id, name="Tees", slug="tees")
        session.add(tees)
        await session.flush()
        session.add(
            Product(
                store_id=store.id,
                name="Acme Tee",
                slug="acme-tee",
                price=Decimal("12.50"),
                compare_at_price=Decimal("20"),
                category_id=tees.id,
                in_stock=False,
            )
        )
        await session.commit()
    return store


class TestDemoStorefront:
    """未解析到店铺时返回 Demo 数据"""

    async def test_products_camel_case(self, client):
        response = await client.get("/api/store/products")

        assert response.status_code == 200
        data = response.json()
        assert len(data) == len(DEMO_PRODUCTS)
        first = data[0]
        assert first["compareAtPrice"] == 60
        assert first["inStock"] is True
        assert "compare_at_price" not in first

    async def test_categories(self, client):
        response = await client.get("/api/store/categories")
        assert [c["slug"] for c in response.json()] == [c.slug for c in DEMO_CATEGORIES]

    async def test_config(self, client):
        response = await client.get("/api/store/config")

        data = response.json()
        assert data["name"] == DEMO_STORE_CONFIG.name
        assert data["currencySymbol"] == "$"
        assert "socialLinks" in data

    async def test_unknown_store_falls_back_to_demo(self, client):
        response = await client.get("/api/store/products", headers={PATHNAME_HEADER: "/store/nobody"})
        assert len(response.json()) == len(DEMO_PRODUCTS)

    async def test_demo_mode_without_database(self, demo_client):
        response = await demo_client.get("/api/store/products", headers={"host": "acme.kriya.store"})

        assert response.status_code == 200
        assert len(response.json()) == len(DEMO_PRODUCTS)

    async def test_search_and_category(self, client):
        by_category = await client.get("/api/store/products", params={"category": "tech"})
        assert {p["category"] for p in by_category.json()} == {"tech"}

        by_search = await client.get("/api/store/products", params={"search": "sneakers", "category": "tech"})
        assert [p["name"] for p in by_search.json()] == ["Retro Sneakers"]

    async def test_product_not_found(self, client):
        response = await client.get("/api/store/products/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"error": "Product not found", "code": "NOT_FOUND"}


class TestTenantStorefront:
    """按 Host / x-pathname 解析店铺"""

    async def test_local_pathname(self, client, acme):
        response = await client.get("/api/store/products", headers={PATHNAME_HEADER: "/store/acme"})

        data = response.json()
        assert [p["name"] for p in data] == ["Acme Tee"]
        assert data[0]["price"] == 12.5
        assert data[0]["compareAtPrice"] == 20
        assert data[0]["category"] == "tees"
        assert data[0]["inStock"] is False

    async def test_subdomain(self, client, acme):
        response = await client.get("/api/store/categories", headers={"host": "acme.kriya.store"})
        assert [c["slug"] for c in response.json()] == ["tees"]

    async def test_custom_domain(self, client, acme):
        response = await client.get("/api/store/config", headers={"host": "shop.acme.com"})

        data = response.json()
        assert data["name"] == "Acme"
        assert data["tagline"] == "Goods"
        assert data["theme"] == "soft"
        assert data["currency"] == "EUR"
        assert data["currencySymbol"] == "€"

    async def test_get_product(self, client, acme):
        headers = {"host": "acme.kriya.store"}
        products = (await client.get("/api/store/products", headers=headers)).json()

        response = await client.get(f"/api/store/products/{products[0]['id']}", headers=headers)

        assert response.status_code == 200
        assert response.json()["name"] == "Acme Tee"

    async def test_product_of_other_store_is_404(self, client, data_source, acme):
        await create_store(data_source, slug="other", owner_id="owner-2")
        products = (await client.get("/api/store/products", headers={"host": "acme.kriya.store"})).json()

        response = await client.get(
            f"/api/store/products/{products[0]['id']}",
            headers={"host": "other.kriya.store"},
        )

        assert response.status_code == 404

    async def test_search_in_store(self, client, acme):
        response = await client.get(
            "/api/store/products",
            params={"search": "TEE"},
            headers={"host": "acme.kriya.store"},
        )
        assert [p["name"] for p in response.json()] == ["Acme Tee"]


class TestPathnameHeader:
    async def test_response_carries_pathname(self, client):
        response = await client.get("/api/store/config")
        assert response.headers[PATHNAME_HEADER] == "/api/store/config"

    async def test_upstream_pathname_preserved(self, client):
        response = await client.get("/api/store/config", headers={PATHNAME_HEADER: "/store/acme/cart"})
        assert response.headers[PATHNAME_HEADER] == "/store/acme/cart"

    async def test_assets_skipped(self, client):
        response = await client.get("/favicon.ico")
        assert PATHNAME_HEADER not in response.headers


class TestRefresh:
    async def test_refresh_demo(self, client):
        response = await client.post("/api/refresh")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Cache cleared and data refreshed",
            "counts": {"products": len(DEMO_PRODUCTS), "categories": len(DEMO_CATEGORIES)},
        }

    async def test_refresh_clears_tenant_cache(self, client, data_source):
        headers = {"host": "late.kriya.store"}
        before = await client.get("/api/store/config", headers=headers)
        assert before.json()["name"] == DEMO_STORE_CONFIG.name

        await create_store(data_source, slug="late")
        cached = await client.get("/api/store/config", headers=headers)
        assert cached.json()["name"] == DEMO_STORE_CONFIG.name

        await client.post("/api/refresh")
        after = await client.get("/api/store/config", headers=headers)
        assert after.json()["name"] == "Late"

    async def test_tenant_cache_expires(self, client, data_source, clock):
        headers = {"host": "late.kriya.store"}
        await client.get("/api/store/config", headers=headers)
        await create_store(data_source, slug="late")

        clock.advance(61)
        response = await client.get("/api/store/config", headers=headers)

        assert response.json()["name"] == "Late"


class TestDemoSheet:
    async def test_demo_sheet_products(self, test_settings, data_source, sheets_client, fake_sheets, clock):
        fake_sheets.set_rows("demo-sheet", PRODUCT_RANGE, [["s1", "Sheet Tee", "", "7"]])
        settings = test_settings.model_copy(update={"DEMO_SHEET_ID": "demo-sheet"})
        app = create_app(settings=settings, data_source=data_source, sheets_client=sheets_client, clock=clock)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as ac:
            response = await ac.get("/api/store/products")

        assert [p["name"] for p in response.json()] == ["Sheet Tee"]

    async def test_unreadable_demo_sheet_serves_demo_data(
        self, test_settings, data_source, sheets_client, fake_sheets, clock
    ):
        fake_sheets.raw_body = b"<html>captive portal</html>"
        settings = test_settings.model_copy(update={"DEMO_SHEET_ID": "demo-sheet"})
        app = create_app(settings=settings, data_source=data_source, sheets_client=sheets_client, clock=clock)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as ac:
            products = await ac.get("/api/store/products")
            fake_sheets.raw_body = b"[]"
            config = await ac.get("/api/store/config")

        assert products.status_code == 200
        assert len(products.json()) == len(DEMO_PRODUCTS)
        assert config.status_code == 200
        assert config.json()["name"] == DEMO_STORE_CONFIG.name


class TestHealth:
    async def test_root_health(self, client):
        response = await client.get("/health")

        data = response.json()
        assert data["status"] == "healthy"
        assert data["mode"] == "database"
        assert data["database"]["status"] == "healthy"

    async def test_api_health_demo(self, demo_client):
        response = await demo_client.get("/api/health")

        data = response.json()
        assert data["status"] == "healthy"
        assert data["mode"] == "demo"
        assert data["database"]["status"] == "not_configured"
