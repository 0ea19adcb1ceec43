"""
API 依赖注入

提供当前店主、当前店铺（租户）、数据库会话与各服务对象的依赖
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from kriya.core.config import Settings
from kriya.core.errors import AuthError
from kriya.core.logging import get_logger
from kriya.core.security import bearer_scheme, decode_token
from kriya.database.engine import DataSource, get_data_source, get_db
from kriya.database.models import Store
from kriya.domain.storefront import StoreRecord
from kriya.services.sheet_catalog import SheetCatalog
from kriya.services.store_manager import StoreManager
from kriya.services.store_service import CatalogService
from kriya.services.sync_service import CatalogImporter
from kriya.tenancy.cache import TenantCache
from kriya.tenancy.middleware import PATHNAME_HEADER
from kriya.tenancy.resolver import StoreIdentifier, resolve_identifier

logger = get_logger(__name__)


# ============================================================
# 进程级对象（create_app 中构造，挂在 app.state 上）
# ============================================================

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_tenant_cache(request: Request) -> TenantCache:
    return request.app.state.tenant_cache


def get_sheet_catalog(request: Request) -> SheetCatalog:
    return request.app.state.sheet_catalog


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service


def get_importer(request: Request) -> CatalogImporter:
    return request.app.state.importer


AppSettings = Annotated[Settings, Depends(get_app_settings)]
DataSourceDep = Annotated[DataSource, Depends(get_data_source)]
TenantCacheDep = Annotated[TenantCache, Depends(get_tenant_cache)]
SheetCatalogDep = Annotated[SheetCatalog, Depends(get_sheet_catalog)]
CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
ImporterDep = Annotated[CatalogImporter, Depends(get_importer)]
DbSession = Annotated[AsyncSession, Depends(get_db)]


# ============================================================
# 认证
# ============================================================

async def get_current_owner_id(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> str:
    """
    获取当前店主 ID

    从外部身份服务签发的 JWT 中取 sub
    """
    if credentials is None or not credentials.credentials:
        raise AuthError("Unauthorized")

    payload = decode_token(credentials.credentials)
    if not payload:
        raise AuthError("Invalid token", error_code="INVALID_TOKEN")

    owner_id = payload.get("sub")
    if not owner_id:
        raise AuthError("Invalid token payload", error_code="INVALID_TOKEN")

    return str(owner_id)


CurrentOwner = Annotated[str, Depends(get_current_owner_id)]


# ============================================================
# 租户解析
# ============================================================

def get_store_identifier(request: Request, settings: AppSettings) -> StoreIdentifier:
    """根据 Host 与 x-pathname 解析店铺标识"""
    return resolve_identifier(
        host=request.headers.get("host"),
        path=request.headers.get(PATHNAME_HEADER) or request.url.path,
        base_domain=settings.BASE_DOMAIN,
        local_patterns=settings.LOCAL_HOST_PATTERNS,
    )


async def get_current_store(
    identifier: Annotated[StoreIdentifier, Depends(get_store_identifier)],
    cache: TenantCacheDep,
) -> Optional[StoreRecord]:
    """当前请求对应的店铺，Demo 或未找到时为 None"""
    store = await cache.resolve(identifier)
    logger.debug("store_resolved", key=identifier.cache_key, found=store is not None)
    return store


CurrentStore = Annotated[Optional[StoreRecord], Depends(get_current_store)]


# ============================================================
# 后台
# ============================================================

def get_store_manager(db: DbSession, settings: AppSettings) -> StoreManager:
    return StoreManager(db, plan_limits=settings.PLAN_STORE_LIMITS)


StoreManagerDep = Annotated[StoreManager, Depends(get_store_manager)]


async def get_owned_store(store_id: str, manager: StoreManagerDep, owner_id: CurrentOwner) -> Store:
    """路径中的店铺必须属于当前店主，否则 404"""
    return await manager.get_owned_store(store_id, owner_id)


OwnedStore = Annotated[Store, Depends(get_owned_store)]
