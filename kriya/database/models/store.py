"""
店铺模型

租户即店铺：全局表，按 slug（子域名）或自定义域名解析
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kriya.database.base import Base, JSONType, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from kriya.database.models.catalog import Category, Product
    from kriya.database.models.order import Order
    from kriya.database.models.sync_log import SyncLog


class StoreTheme(str, Enum):
    """店铺主题"""
    NEON = "neon"
    SOFT = "soft"
    BRUTAL = "brutal"


class StorePlan(str, Enum):
    """套餐"""
    FREE = "free"
    STARTER = "starter"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class Store(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    店铺实体

    slug 全局唯一且创建后不可修改；不做物理删除，通过 is_active 停用
    """

    __tablename__ = "stores"

    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # 路由标识
    slug: Mapped[str] = mapped_column(String(63), nullable=False, unique=True)
    custom_domain: Mapped[Optional[str]] = mapped_column(String(253), unique=True)

    # 基本信息
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    tagline: Mapped[Optional[str]] = mapped_column(String(200))
    logo_url: Mapped[Optional[str]] = mapped_column(String(500))
    theme: Mapped[str] = mapped_column(String(20), default=StoreTheme.NEON.value, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
    currency_symbol: Mapped[str] = mapped_column(String(8), default="$", nullable=False)
    announcement: Mapped[Optional[str]] = mapped_column(Text)

    # 社交链接
    instagram_url: Mapped[Optional[str]] = mapped_column(String(500))
    twitter_url: Mapped[Optional[str]] = mapped_column(String(500))
    tiktok_url: Mapped[Optional[str]] = mapped_column(String(500))

    # Google Sheets 导入源
    google_sheet_id: Mapped[Optional[str]] = mapped_column(String(200))
    google_sheet_last_sync: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # 状态与套餐
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    plan: Mapped[str] = mapped_column(String(20), default=StorePlan.FREE.value, nullable=False)
    settings: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)

    # 关系
    categories: Mapped[List["Category"]] = relationship(
        back_populates="store", cascade="all, delete-orphan", passive_deletes=True
    )
    products: Mapped[List["Product"]] = relationship(
        back_populates="store", cascade="all, delete-orphan", passive_deletes=True
    )
    orders: Mapped[List["Order"]] = relationship(
        back_populates="store", cascade="all, delete-orphan", passive_deletes=True
    )
    sync_logs: Mapped[List["SyncLog"]] = relationship(
        back_populates="store", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Store(id={self.id}, slug={self.slug}, owner_id={self.owner_id})>"
