"""
目录管理服务 (Catalog Manager)

后台分类 / 商品 CRUD，所有操作都限定在店铺范围内
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kriya.core.errors import ConflictError, NotFoundError, ValidationError
from kriya.core.logging import get_logger
from kriya.database.models import Category, Product
from kriya.services.sheet_rows import category_slug, product_slug

logger = get_logger(__name__)

CATEGORY_FIELDS = {"name", "slug", "description", "image_url", "sort_order", "is_active"}
PRODUCT_FIELDS = {
    "external_id",
    "name",
    "slug",
    "description",
    "price",
    "compare_at_price",
    "images",
    "tags",
    "category_id",
    "in_stock",
    "stock_quantity",
    "variants",
    "extra_data",
    "is_active",
    "sort_order",
}
REQUIRED_FIELDS = {"name", "slug", "price", "images", "tags", "in_stock", "is_active", "sort_order"}


def _check_changes(changes: Dict[str, Any], allowed: set) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
    for field in REQUIRED_FIELDS & set(changes):
        if changes[field] is None:
            raise ValidationError(f"{field} cannot be null")


class CatalogManager:
    """目录管理服务"""

    def __init__(self, session: AsyncSession, store_id: str):
        self.session = session
        self.store_id = store_id

    # ============================================================
    # 分类
    # ============================================================

    async def list_categories(self) -> List[Category]:
        result = await self.session.execute(
            select(Category)
            .where(Category.store_id == self.store_id)
            .order_by(Category.sort_order, Category.created_at)
        )
        return list(result.scalars().all())

    async def get_category(self, category_id: str) -> Category:
        result = await self.session.execute(
            select(Category).where(Category.id == category_id, Category.store_id == self.store_id)
        )
        category = result.scalar_one_or_none()
        if category is None:
            raise NotFoundError("Category not found")
        return category

    async def _ensure_category_slug_free(self, slug: str, exclude_id: Optional[str] = None) -> None:
        query = select(Category.id).where(Category.store_id == self.store_id, Category.slug == slug)
        if exclude_id:
            query = query.where(Category.id != exclude_id)
        if (await self.session.execute(query.limit(1))).scalar_one_or_none():
            raise ConflictError(f"Category slug '{slug}' already exists", error_code="SLUG_TAKEN")

    async def create_category(self, data: Dict[str, Any]) -> Category:
        """创建分类，slug 缺省时由名称生成"""
        data = {k: v for k, v in data.items() if k in CATEGORY_FIELDS}
        if not data.get("name"):
            raise ValidationError("Name is required")
        data["slug"] = data.get("slug") or category_slug(data["name"])
        await self._ensure_category_slug_free(data["slug"])

        category = Category(store_id=self.store_id, **data)
        self.session.add(category)
        await self._commit(f"Category slug '{data['slug']}' already exists")

        logger.info("category_created", store_id=self.store_id, category_id=category.id)
        return category

    async def update_category(self, category_id: str, changes: Dict[str, Any]) -> Category:
        category = await self.get_category(category_id)
        _check_changes(changes, CATEGORY_FIELDS)
        if changes.get("slug") and changes["slug"] != category.slug:
            await self._ensure_category_slug_free(changes["slug"], exclude_id=category.id)

        for field, value in changes.items():
            setattr(category, field, value)
        await self._commit("Category slug already exists")
        return category

    async def delete_category(self, category_id: str) -> None:
        """删除分类（商品的 category_id 由数据库置空）"""
        category = await self.get_category(category_id)
        await self.session.delete(category)
        await self.session.commit()
        logger.info("category_deleted", store_id=self.store_id, category_id=category_id)

    # ============================================================
    # 商品
    # ============================================================

    async def list_products(self) -> List[Product]:
        result = await self.session.execute(
            select(Product)
            .where(Product.store_id == self.store_id)
            .order_by(Product.sort_order, Product.created_at)
        )
        return list(result.scalars().all())

    async def get_product(self, product_id: str) -> Product:
        result = await self.session.execute(
            select(Product).where(Product.id == product_id, Product.store_id == self.store_id)
        )
        product = result.scalar_one_or_none()
        if product is None:
            raise NotFoundError("Product not found")
        return product

    async def _validate_product(self, data: Dict[str, Any]) -> None:
        for field in ("price", "compare_at_price"):
            value = data.get(field)
            if value is not None and Decimal(str(value)) < 0:
                raise ValidationError(f"{field} must be greater than or equal to 0")

        if data.get("category_id"):
            result = await self.session.execute(
                select(Category.id).where(
                    Category.id == data["category_id"],
                    Category.store_id == self.store_id,
                )
            )
            if result.scalar_one_or_none() is None:
                raise ValidationError("Category does not belong to this store")

    async def create_product(self, data: Dict[str, Any]) -> Product:
        """创建商品，slug 缺省时由名称生成"""
        data = {k: v for k, v in data.items() if k in PRODUCT_FIELDS}
        if not data.get("name"):
            raise ValidationError("Name is required")
        if data.get("price") is None:
            raise ValidationError("Price is required")
        await self._validate_product(data)
        data["slug"] = data.get("slug") or product_slug(data["name"])

        product = Product(store_id=self.store_id, **data)
        self.session.add(product)
        await self._commit("A product with this external id already exists")

        logger.info("product_created", store_id=self.store_id, product_id=product.id)
        return product

    async def update_product(self, product_id: str, changes: Dict[str, Any]) -> Product:
        product = await self.get_product(product_id)
        _check_changes(changes, PRODUCT_FIELDS)
        await self._validate_product(changes)

        for field, value in changes.items():
            setattr(product, field, value)
        await self._commit("A product with this external id already exists")
        return product

    async def delete_product(self, product_id: str) -> None:
        product = await self.get_product(product_id)
        await self.session.delete(product)
        await self.session.commit()
        logger.info("product_deleted", store_id=self.store_id, product_id=product_id)

    async def _commit(self, conflict_message: str) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning("catalog_write_conflict", store_id=self.store_id, error=str(e.orig))
            raise ConflictError(conflict_message) from e
