"""
租户缓存

标识 → 店铺快照，TTL 默认 60 秒，避免每个请求都查库
- demo 标识直接返回 None，不经过缓存
- 查无此店也会被缓存（值为 None）
- 查询异常视为未找到，不写缓存，不向上抛出
"""

from typing import Awaitable, Callable, Optional

from sqlalchemy import select

from kriya.core.cache import MISSING, Clock, TTLCache
from kriya.core.logging import get_logger
from kriya.database.engine import DataSource
from kriya.database.models import Store
from kriya.domain.storefront import StoreRecord
from kriya.tenancy.resolver import IdentifierKind, StoreIdentifier

logger = get_logger(__name__)

StoreLoader = Callable[[StoreIdentifier], Awaitable[Optional[StoreRecord]]]


def database_store_loader(data_source: DataSource) -> StoreLoader:
    """按 slug / 自定义域名查询启用中的店铺"""

    async def load(identifier: StoreIdentifier) -> Optional[StoreRecord]:
        if not data_source.is_configured:
            return None

        query = select(Store).where(Store.is_active.is_(True))
        if identifier.kind == IdentifierKind.SLUG:
            query = query.where(Store.slug == identifier.value)
        else:
            query = query.where(Store.custom_domain == identifier.value)

        async with data_source.session() as session:
            result = await session.execute(query.limit(1))
            store = result.scalar_one_or_none()

        return StoreRecord.model_validate(store) if store else None

    return load


class TenantCache:
    """租户缓存（每个进程构造一次，通过 app.state 传入请求处理）"""

    def __init__(
        self,
        loader: StoreLoader,
        ttl_seconds: float = 60.0,
        clock: Optional[Clock] = None,
    ):
        self._loader = loader
        self._cache = TTLCache(ttl_seconds=ttl_seconds, clock=clock)

    async def resolve(self, identifier: StoreIdentifier) -> Optional[StoreRecord]:
        """解析店铺；Demo 或解析失败返回 None"""
        if identifier.is_demo:
            return None

        key = identifier.cache_key
        cached = self._cache.get(key)
        if cached is not MISSING:
            logger.debug("store_cache_hit", key=key, found=cached is not None)
            return cached

        try:
            store = await self._loader(identifier)
        except Exception as e:
            logger.warning("store_resolve_error", key=key, error=str(e))
            return None

        self._cache.set(key, store)
        logger.debug("store_cache_miss", key=key, found=store is not None)
        return store

    def invalidate(self, slug: Optional[str] = None, domain: Optional[str] = None) -> None:
        """
        失效缓存

        指定 slug / domain 时只删除对应条目，都不指定时清空全部
        """
        if slug is None and domain is None:
            self._cache.clear()
            return
        if slug is not None:
            self._cache.delete(StoreIdentifier.slug(slug).cache_key)
        if domain is not None:
            self._cache.delete(StoreIdentifier.domain(domain).cache_key)
