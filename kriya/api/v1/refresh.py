"""
缓存刷新 API
"""

from fastapi import APIRouter

from kriya.api.deps import SheetCatalogDep, TenantCacheDep
from kriya.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("")
async def refresh_cache(sheet_catalog: SheetCatalogDep, tenant_cache: TenantCacheDep) -> dict:
    """
    清空读缓存并重新读取 Demo 数据

    同时清空租户缓存，使店铺设置变更立即生效
    """
    tenant_cache.invalidate()
    counts = await sheet_catalog.refresh()
    logger.info("cache_refreshed", **counts)

    return {
        "success": True,
        "message": "Cache cleared and data refreshed",
        "counts": counts,
    }
