"""
Demo 表格目录

Demo 模式（未解析到店铺）下前台读取的目录：
- 配置了 DEMO_SHEET_ID 与 API Key 时从表格读取，结果按 TTL 缓存
- 未配置或读取失败时回退到内置示例数据（失败结果不缓存）
"""

from typing import Dict, List, Optional

from kriya.core.cache import MISSING, Clock, TTLCache
from kriya.core.errors import SheetFetchError
from kriya.core.logging import get_logger
from kriya.domain.storefront import CategoryView, ProductView, SocialLinks, StoreConfig
from kriya.services.demo_data import DEMO_CATEGORIES, DEMO_PRODUCTS, DEMO_STORE_CONFIG
from kriya.services.sheet_rows import (
    CATEGORY_RANGE,
    CONFIG_RANGE,
    PRODUCT_RANGE,
    Parsed,
    parse_category_row,
    parse_config_rows,
    parse_product_row,
)
from kriya.services.sheets_client import GoogleSheetsClient

logger = get_logger(__name__)

_PRODUCTS_KEY = "products"
_CATEGORIES_KEY = "categories"
_CONFIG_KEY = "config"


def config_from_sheet(values: Dict[str, str], sheet_id: Optional[str]) -> StoreConfig:
    """Config 表键值 → 前台配置"""
    return StoreConfig(
        name=values.get("name", "My Store"),
        tagline=values.get("tagline", "Welcome to our store"),
        theme=values.get("theme", "neon"),
        logo=values.get("logo"),
        currency=values.get("currency", "USD"),
        currency_symbol=values.get("currencySymbol", "$"),
        announcement=values.get("announcement"),
        social_links=SocialLinks(
            instagram=values.get("instagram"),
            twitter=values.get("twitter"),
            tiktok=values.get("tiktok"),
        ),
        sheet_ref=sheet_id,
    )


class SheetCatalog:
    """表格目录（每个进程构造一次）"""

    def __init__(
        self,
        client: Optional[GoogleSheetsClient],
        sheet_id: Optional[str],
        ttl_seconds: float = 60.0,
        clock: Optional[Clock] = None,
    ):
        self.client = client
        self.sheet_id = sheet_id or None
        self._cache = TTLCache(ttl_seconds=ttl_seconds, clock=clock)

    @property
    def is_configured(self) -> bool:
        return bool(self.sheet_id and self.client and self.client.is_configured)

    async def products(self) -> List[ProductView]:
        cached = self._cache.get(_PRODUCTS_KEY)
        if cached is not MISSING:
            return cached
        if not self.is_configured:
            return list(DEMO_PRODUCTS)

        try:
            rows = await self.client.get_values(self.sheet_id, PRODUCT_RANGE)
        except SheetFetchError as e:
            logger.warning("demo_sheet_fallback", kind=_PRODUCTS_KEY, error=e.message)
            return list(DEMO_PRODUCTS)

        products = []
        for row in rows:
            result = parse_product_row(row)
            if not isinstance(result, Parsed):
                continue
            record = result.record
            products.append(
                ProductView(
                    id=record.external_id,
                    name=record.name,
                    description=record.description or "",
                    price=record.price,
                    compare_at_price=record.compare_at_price,
                    images=record.images,
                    category=record.category_slug,
                    tags=record.tags,
                    in_stock=record.in_stock,
                )
            )

        self._cache.set(_PRODUCTS_KEY, products)
        return products

    async def categories(self) -> List[CategoryView]:
        cached = self._cache.get(_CATEGORIES_KEY)
        if cached is not MISSING:
            return cached
        if not self.is_configured:
            return list(DEMO_CATEGORIES)

        try:
            rows = await self.client.get_values(self.sheet_id, CATEGORY_RANGE)
        except SheetFetchError as e:
            logger.warning("demo_sheet_fallback", kind=_CATEGORIES_KEY, error=e.message)
            return list(DEMO_CATEGORIES)

        categories = [
            CategoryView(
                id=result.record.external_id,
                name=result.record.name,
                slug=result.record.slug,
                image=result.record.image_url,
            )
            for result in map(parse_category_row, rows)
            if isinstance(result, Parsed)
        ]

        self._cache.set(_CATEGORIES_KEY, categories)
        return categories

    async def config(self) -> StoreConfig:
        cached = self._cache.get(_CONFIG_KEY)
        if cached is not MISSING:
            return cached
        if not self.is_configured:
            return DEMO_STORE_CONFIG

        try:
            rows = await self.client.get_values(self.sheet_id, CONFIG_RANGE)
        except SheetFetchError as e:
            logger.warning("demo_sheet_fallback", kind=_CONFIG_KEY, error=e.message)
            return DEMO_STORE_CONFIG

        config = config_from_sheet(parse_config_rows(rows), self.sheet_id)
        self._cache.set(_CONFIG_KEY, config)
        return config

    def clear(self) -> None:
        self._cache.clear()

    async def refresh(self) -> Dict[str, int]:
        """清空缓存并重新读取全部数据"""
        self.clear()
        products = await self.products()
        categories = await self.categories()
        await self.config()
        logger.info(
            "demo_catalog_refreshed",
            from_sheet=self.is_configured,
            products=len(products),
            categories=len(categories),
        )
        return {"products": len(products), "categories": len(categories)}
