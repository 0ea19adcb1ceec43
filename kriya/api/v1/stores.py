"""
店铺管理 API

店主后台：店铺列表 / 创建 / 设置更新 / 手动同步 / 同步记录
所有接口需要认证；不属于当前店主的店铺一律返回 404
"""

from typing import List

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from kriya.api.deps import (
    CurrentOwner,
    DbSession,
    ImporterDep,
    OwnedStore,
    StoreManagerDep,
    TenantCacheDep,
)
from kriya.api.v1.schemas import StoreCreate, StoreResponse, StoreUpdate, SyncLogResponse
from kriya.core.errors import ValidationError
from kriya.core.logging import get_logger
from kriya.database.models import Store, SyncLog
from kriya.domain.storefront import StoreRecord
from kriya.services.sync_service import NO_SHEET_MESSAGE

logger = get_logger(__name__)

router = APIRouter()


@router.get("", response_model=List[StoreResponse])
async def list_stores(
    db: DbSession,
    manager: StoreManagerDep,
    owner_id: CurrentOwner,
) -> List[Store]:
    """获取当前店主的店铺"""
    return await manager.list_stores(owner_id)


@router.post("", response_model=StoreResponse, status_code=status.HTTP_201_CREATED)
async def create_store(
    data: StoreCreate,
    db: DbSession,
    manager: StoreManagerDep,
    owner_id: CurrentOwner,
) -> Store:
    """
    创建店铺

    - 400: 缺少名称 / slug，或 slug 格式不合法
    - 409: slug 已被占用
    - 403: 超出套餐店铺数量
    """
    return await manager.create_store(
        owner_id=owner_id,
        name=data.name,
        slug=data.slug,
        tagline=data.tagline,
        theme=data.theme.value if data.theme else None,
        currency=data.currency,
        currency_symbol=data.currency_symbol,
        google_sheet_id=data.sheet_ref,
    )


@router.get("/{store_id}", response_model=StoreResponse)
async def get_store(store: OwnedStore) -> Store:
    """获取单个店铺"""
    return store


@router.patch("/{store_id}", response_model=StoreResponse)
async def update_store(
    data: StoreUpdate,
    db: DbSession,
    store: OwnedStore,
    manager: StoreManagerDep,
    tenant_cache: TenantCacheDep,
) -> Store:
    """更新店铺设置，并失效该店铺的租户缓存"""
    old_domain = store.custom_domain
    store = await manager.update_store(store, data.changes())

    tenant_cache.invalidate(slug=store.slug)
    for domain in {old_domain, store.custom_domain} - {None}:
        tenant_cache.invalidate(domain=domain)
    return store


@router.post("/{store_id}/sync")
async def sync_store(
    db: DbSession,
    store: OwnedStore,
    importer: ImporterDep,
):
    """
    手动触发 Google Sheets 同步

    - 400: 未配置表格
    - 404: 店铺不存在或不属于当前店主
    - 409: 该店铺已有同步在执行
    - 500: 同步失败（retryable 表示可稍后重试）
    """
    if not store.google_sheet_id:
        raise ValidationError(NO_SHEET_MESSAGE, error_code="NO_SHEET_CONFIGURED")

    result = await importer.sync(StoreRecord.model_validate(store))
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": result.error or "Sync failed",
                "code": "SYNC_FAILED",
                "retryable": result.retryable,
            },
        )
    return result.to_dict()


@router.get("/{store_id}/sync-logs", response_model=List[SyncLogResponse])
async def list_sync_logs(
    db: DbSession,
    store: OwnedStore,
    manager: StoreManagerDep,
    limit: int = Query(20, ge=1, le=100),
) -> List[SyncLog]:
    """最近的同步记录"""
    return await manager.list_sync_logs(store.id, limit=limit)
