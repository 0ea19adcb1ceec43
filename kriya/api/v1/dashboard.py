"""
后台目录 API

店主对分类 / 商品的 CRUD，所有操作限定在自己的店铺内
"""

from typing import List

from fastapi import APIRouter, Depends, status

from kriya.api.deps import DbSession, OwnedStore
from kriya.api.v1.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from kriya.database.models import Category, Product
from kriya.services.catalog_manager import CatalogManager

router = APIRouter()


def get_catalog_manager(db: DbSession, store: OwnedStore) -> CatalogManager:
    return CatalogManager(db, store.id)


# ============================================================
# 分类
# ============================================================

@router.get("/{store_id}/categories", response_model=List[CategoryResponse])
async def list_categories(manager: CatalogManager = Depends(get_catalog_manager)) -> List[Category]:
    """获取店铺全部分类（含停用）"""
    return await manager.list_categories()


@router.post(
    "/{store_id}/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_category(
    data: CategoryCreate,
    manager: CatalogManager = Depends(get_catalog_manager),
) -> Category:
    """创建分类（slug 在店铺内唯一）"""
    return await manager.create_category(data.model_dump())


@router.patch("/{store_id}/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    manager: CatalogManager = Depends(get_catalog_manager),
) -> Category:
    """更新分类"""
    return await manager.update_category(category_id, data.model_dump(exclude_unset=True))


@router.delete("/{store_id}/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: str,
    manager: CatalogManager = Depends(get_catalog_manager),
) -> None:
    """删除分类，原分类下的商品变为未分类"""
    await manager.delete_category(category_id)


# ============================================================
# 商品
# ============================================================

@router.get("/{store_id}/products", response_model=List[ProductResponse])
async def list_products(manager: CatalogManager = Depends(get_catalog_manager)) -> List[Product]:
    """获取店铺全部商品（含下架）"""
    return await manager.list_products()


@router.post(
    "/{store_id}/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    data: ProductCreate,
    manager: CatalogManager = Depends(get_catalog_manager),
) -> Product:
    """创建商品"""
    return await manager.create_product(data.to_fields())


@router.patch("/{store_id}/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    data: ProductUpdate,
    manager: CatalogManager = Depends(get_catalog_manager),
) -> Product:
    """更新商品"""
    return await manager.update_product(product_id, data.changes())


@router.delete("/{store_id}/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    manager: CatalogManager = Depends(get_catalog_manager),
) -> None:
    """删除商品"""
    await manager.delete_product(product_id)
