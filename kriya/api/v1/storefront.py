"""
店铺前台 API

无需认证；店铺由 Host / x-pathname 解析，未解析到时返回 Demo 数据。
读取失败降级为 Demo 数据或空列表，不返回 500。
"""

from typing import List, Optional

from fastapi import APIRouter, Query

from kriya.api.deps import CatalogServiceDep, CurrentStore
from kriya.core.errors import NotFoundError
from kriya.domain.storefront import CategoryView, ProductView, StoreConfig, StoreRecord

router = APIRouter()


def _store_id(store: Optional[StoreRecord]) -> Optional[str]:
    return store.id if store else None


@router.get("/products", response_model=List[ProductView])
async def list_products(
    store: CurrentStore,
    catalog: CatalogServiceDep,
    category: Optional[str] = Query(None, description="分类 slug"),
    search: Optional[str] = Query(None, description="名称 / 描述关键字"),
) -> List[ProductView]:
    """
    获取商品列表

    search 优先于 category
    """
    store_id = _store_id(store)
    if search:
        return await catalog.search(store_id, search)
    if category:
        return await catalog.products_by_category(store_id, category)
    return await catalog.list_products(store_id)


@router.get("/products/{product_id}", response_model=ProductView)
async def get_product(
    product_id: str,
    store: CurrentStore,
    catalog: CatalogServiceDep,
) -> ProductView:
    """获取单个商品"""
    product = await catalog.get_product(_store_id(store), product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


@router.get("/categories", response_model=List[CategoryView])
async def list_categories(store: CurrentStore, catalog: CatalogServiceDep) -> List[CategoryView]:
    """获取分类列表"""
    return await catalog.list_categories(_store_id(store))


@router.get("/config", response_model=StoreConfig)
async def get_store_config(store: CurrentStore, catalog: CatalogServiceDep) -> StoreConfig:
    """获取店铺配置（主题、币种等）"""
    return await catalog.config(store)
