"""
店铺管理服务 (Store Manager)

后台店铺 CRUD：创建（slug 校验、套餐上限）、设置更新、归属校验、同步记录
"""

import re
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kriya.core.errors import ConflictError, NotFoundError, PlanLimitExceeded, ValidationError
from kriya.core.logging import get_logger
from kriya.database.models import Store, StorePlan, StoreTheme, SyncLog

logger = get_logger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$")
SLUG_MIN_LENGTH = 3
SLUG_MAX_LENGTH = 63

# 裸主机名：至少两级，每级 1-63 位字母数字与连字符，首尾不能是连字符
DOMAIN_PATTERN = re.compile(r"^(?=.{1,253}$)([a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")

STORE_NOT_FOUND_MESSAGE = "Store not found or access denied"

# 套餐等级，从低到高
PLAN_ORDER = [StorePlan.FREE.value, StorePlan.STARTER.value, StorePlan.PRO.value, StorePlan.ENTERPRISE.value]

# 允许通过设置接口修改的字段（slug 不可修改）
UPDATABLE_FIELDS = {
    "name",
    "tagline",
    "logo_url",
    "theme",
    "currency",
    "currency_symbol",
    "announcement",
    "instagram_url",
    "twitter_url",
    "tiktok_url",
    "google_sheet_id",
    "custom_domain",
    "is_active",
    "settings",
}
NON_NULLABLE_FIELDS = {"name", "theme", "currency", "currency_symbol", "is_active", "settings"}


def validate_store_slug(slug: str) -> None:
    """校验店铺 slug（小写字母数字与连字符，首尾不能是连字符，至少 3 位）"""
    if (
        len(slug) < SLUG_MIN_LENGTH
        or len(slug) > SLUG_MAX_LENGTH
        or not SLUG_PATTERN.match(slug)
    ):
        raise ValidationError(
            "Slug must be lowercase alphanumeric with hyphens, at least 3 characters",
            error_code="INVALID_SLUG",
        )


def normalize_custom_domain(value: str) -> str:
    """
    自定义域名规范化为小写裸主机名

    带协议、端口或路径的值无法与请求 Host 匹配，直接拒绝
    """
    domain = value.strip().lower().rstrip(".")
    if not DOMAIN_PATTERN.match(domain):
        raise ValidationError(
            "Custom domain must be a bare hostname such as shop.example.com",
            error_code="INVALID_DOMAIN",
        )
    return domain


def owner_plan(stores: List[Store]) -> str:
    """店主套餐取其名下店铺中最高的等级，没有店铺时为 free"""
    ranks = [PLAN_ORDER.index(s.plan) for s in stores if s.plan in PLAN_ORDER]
    return PLAN_ORDER[max(ranks)] if ranks else StorePlan.FREE.value


class StoreManager:
    """店铺管理服务"""

    def __init__(self, session: AsyncSession, plan_limits: Optional[Dict[str, Optional[int]]] = None):
        self.session = session
        self.plan_limits = plan_limits if plan_limits is not None else {StorePlan.FREE.value: 1}

    # ============================================================
    # 查询
    # ============================================================

    async def list_stores(self, owner_id: str) -> List[Store]:
        """店主名下的全部店铺（新建的在前）"""
        result = await self.session.execute(
            select(Store).where(Store.owner_id == owner_id).order_by(Store.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_owned_store(self, store_id: str, owner_id: str) -> Store:
        """
        获取归属于店主的店铺

        不存在与不属于当前店主同样返回 404，不暴露店铺是否存在
        """
        result = await self.session.execute(
            select(Store).where(Store.id == store_id, Store.owner_id == owner_id)
        )
        store = result.scalar_one_or_none()
        if store is None:
            logger.info("store_access_denied", store_id=store_id, owner_id=owner_id)
            raise NotFoundError(STORE_NOT_FOUND_MESSAGE)
        return store

    async def slug_taken(self, slug: str) -> bool:
        result = await self.session.execute(select(Store.id).where(Store.slug == slug).limit(1))
        return result.scalar_one_or_none() is not None

    async def list_sync_logs(self, store_id: str, limit: int = 20) -> List[SyncLog]:
        """最近的同步记录"""
        result = await self.session.execute(
            select(SyncLog)
            .where(SyncLog.store_id == store_id)
            .order_by(SyncLog.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    # ============================================================
    # 创建 / 更新
    # ============================================================

    async def create_store(
        self,
        owner_id: str,
        name: str,
        slug: str,
        tagline: Optional[str] = None,
        theme: Optional[str] = None,
        currency: Optional[str] = None,
        currency_symbol: Optional[str] = None,
        google_sheet_id: Optional[str] = None,
    ) -> Store:
        """
        创建店铺

        校验顺序：必填 → slug 格式 → slug 唯一 → 套餐上限

        Raises:
            ValidationError: 缺少必填字段或 slug 不合法
            ConflictError: slug 已被占用
            PlanLimitExceeded: 超出套餐店铺数量
        """
        if not name or not slug:
            raise ValidationError("Name and slug are required")
        validate_store_slug(slug)

        if await self.slug_taken(slug):
            raise ConflictError("This slug is already taken", error_code="SLUG_TAKEN")

        existing = await self.list_stores(owner_id)
        plan = owner_plan(existing)
        limit = self.plan_limits.get(plan)
        if limit is not None and len(existing) >= limit:
            logger.info("store_limit_reached", owner_id=owner_id, plan=plan, count=len(existing))
            raise PlanLimitExceeded("You have reached your store limit. Upgrade to create more stores.")

        store = Store(
            owner_id=owner_id,
            name=name,
            slug=slug,
            tagline=tagline or None,
            theme=theme or StoreTheme.NEON.value,
            currency=currency or "USD",
            currency_symbol=currency_symbol or "$",
            google_sheet_id=google_sheet_id or None,
            plan=StorePlan.FREE.value,
            settings={},
        )
        self.session.add(store)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning("store_create_conflict", slug=slug, error=str(e.orig))
            raise ConflictError("This slug is already taken", error_code="SLUG_TAKEN") from e

        logger.info("store_created", store_id=store.id, slug=slug, owner_id=owner_id)
        return store

    async def update_store(self, store: Store, changes: Dict[str, Any]) -> Store:
        """
        更新店铺设置

        Raises:
            ValidationError: 包含不可修改的字段
            ConflictError: 自定义域名已被其他店铺使用
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        for field in NON_NULLABLE_FIELDS & set(changes):
            if changes[field] is None or changes[field] == "":
                raise ValidationError(f"{field} cannot be empty")

        if changes.get("custom_domain"):
            changes["custom_domain"] = normalize_custom_domain(changes["custom_domain"])
            count = await self.session.scalar(
                select(func.count())
                .select_from(Store)
                .where(Store.custom_domain == changes["custom_domain"], Store.id != store.id)
            )
            if count:
                raise ConflictError("This domain is already in use", error_code="DOMAIN_TAKEN")
        elif "custom_domain" in changes:
            changes["custom_domain"] = None

        if "google_sheet_id" in changes:
            changes["google_sheet_id"] = changes["google_sheet_id"] or None

        for field, value in changes.items():
            setattr(store, field, value)

        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("This domain is already in use", error_code="DOMAIN_TAKEN") from e

        logger.info("store_updated", store_id=store.id, fields=sorted(changes))
        return store
