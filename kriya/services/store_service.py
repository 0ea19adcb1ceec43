"""
店铺目录读取服务

前台商品 / 分类读取：
- store_id 为 None（Demo）时读取 Demo 目录，不访问数据库
- 只返回启用中的记录，按 sort_order 排序
- 数据库异常不向上抛出：按操作回退到 Demo 数据或空结果
"""

from typing import List, Optional, Sequence, Tuple

from sqlalchemy import Select, or_, select

from kriya.core.logging import get_logger
from kriya.database.engine import DataSource
from kriya.database.models import Category, Product
from kriya.domain.storefront import (
    CategoryView,
    ProductView,
    StoreConfig,
    StoreRecord,
    parse_variants,
    store_to_config,
)
from kriya.services.demo_data import DEMO_CATEGORIES, DEMO_PRODUCTS, DEMO_STORE_CONFIG
from kriya.services.sheet_catalog import SheetCatalog
from kriya.services.sheet_rows import UNCATEGORIZED

logger = get_logger(__name__)


def escape_like(value: str) -> str:
    """转义 LIKE 通配符"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def product_to_view(product: Product, category_slug: Optional[str]) -> ProductView:
    """数据库商品 → 前台商品"""
    return ProductView(
        id=product.id,
        name=product.name,
        description=product.description or "",
        price=float(product.price),
        compare_at_price=float(product.compare_at_price) if product.compare_at_price else None,
        images=list(product.images or []),
        category=category_slug or UNCATEGORIZED,
        tags=list(product.tags or []),
        in_stock=product.in_stock,
        variants=parse_variants(product.variants),
    )


def category_to_view(category: Category) -> CategoryView:
    return CategoryView(
        id=category.id,
        name=category.name,
        slug=category.slug,
        description=category.description or None,
        image=category.image_url or None,
    )


class CatalogService:
    """店铺目录读取"""

    def __init__(self, data_source: DataSource, demo_catalog: SheetCatalog):
        self.data_source = data_source
        self.demo_catalog = demo_catalog

    def _is_demo(self, store_id: Optional[str]) -> bool:
        return store_id is None or not self.data_source.is_configured

    def _products_query(self, store_id: str) -> Select:
        return (
            select(Product, Category.slug)
            .outerjoin(Category, Product.category_id == Category.id)
            .where(Product.store_id == store_id, Product.is_active.is_(True))
            .order_by(Product.sort_order, Product.created_at)
        )

    async def _fetch_products(self, query: Select) -> List[ProductView]:
        async with self.data_source.session() as session:
            result = await session.execute(query)
            rows: Sequence[Tuple[Product, Optional[str]]] = result.tuples().all()
        return [product_to_view(product, slug) for product, slug in rows]

    async def list_products(self, store_id: Optional[str]) -> List[ProductView]:
        """店铺全部上架商品；查询失败回退到 Demo 商品"""
        if self._is_demo(store_id):
            return await self.demo_catalog.products()

        try:
            return await self._fetch_products(self._products_query(store_id))
        except Exception as e:
            logger.warning("list_products_failed", store_id=store_id, error=str(e))
            return list(DEMO_PRODUCTS)

    async def get_product(self, store_id: Optional[str], product_id: str) -> Optional[ProductView]:
        """单个商品；不存在或查询失败返回 None"""
        if self._is_demo(store_id):
            products = await self.demo_catalog.products()
            return next((p for p in products if p.id == product_id), None)

        try:
            products = await self._fetch_products(
                self._products_query(store_id).where(Product.id == product_id).limit(1)
            )
        except Exception as e:
            logger.warning("get_product_failed", store_id=store_id, product_id=product_id, error=str(e))
            return None
        return products[0] if products else None

    async def list_categories(self, store_id: Optional[str]) -> List[CategoryView]:
        """店铺启用中的分类；查询失败回退到 Demo 分类"""
        if self._is_demo(store_id):
            return await self.demo_catalog.categories()

        query = (
            select(Category)
            .where(Category.store_id == store_id, Category.is_active.is_(True))
            .order_by(Category.sort_order, Category.created_at)
        )
        try:
            async with self.data_source.session() as session:
                result = await session.execute(query)
                categories = result.scalars().all()
        except Exception as e:
            logger.warning("list_categories_failed", store_id=store_id, error=str(e))
            return list(DEMO_CATEGORIES)

        return [category_to_view(c) for c in categories]

    async def products_by_category(self, store_id: Optional[str], category_slug: str) -> List[ProductView]:
        """分类下的商品；分类不存在或查询失败返回空列表"""
        if self._is_demo(store_id):
            products = await self.demo_catalog.products()
            return [p for p in products if p.category == category_slug]

        try:
            async with self.data_source.session() as session:
                result = await session.execute(
                    select(Category.id).where(
                        Category.store_id == store_id,
                        Category.slug == category_slug,
                    )
                )
                category_id = result.scalar_one_or_none()
            if category_id is None:
                return []
            return await self._fetch_products(
                self._products_query(store_id).where(Product.category_id == category_id)
            )
        except Exception as e:
            logger.warning(
                "products_by_category_failed",
                store_id=store_id,
                category=category_slug,
                error=str(e),
            )
            return []

    async def search(self, store_id: Optional[str], query: str) -> List[ProductView]:
        """按名称 / 描述做不区分大小写的子串搜索；查询失败返回空列表"""
        if self._is_demo(store_id):
            needle = query.lower()
            products = await self.demo_catalog.products()
            return [
                p for p in products
                if needle in p.name.lower() or needle in p.description.lower()
            ]

        pattern = f"%{escape_like(query)}%"
        statement = self._products_query(store_id).where(
            or_(
                Product.name.ilike(pattern, escape="\\"),
                Product.description.ilike(pattern, escape="\\"),
            )
        )
        try:
            return await self._fetch_products(statement)
        except Exception as e:
            logger.warning("search_products_failed", store_id=store_id, query=query, error=str(e))
            return []

    async def config(self, store: Optional[StoreRecord]) -> StoreConfig:
        """前台店铺配置"""
        if store is None:
            return await self.demo_catalog.config()
        return store_to_config(store, DEMO_STORE_CONFIG)
