"""
ORM 公共基础

- Base: 全部店铺表共用的声明式基类，datetime 一律带时区
- JSONType: PostgreSQL 下为 JSONB，其他方言（测试用 SQLite）为 JSON
- UUIDPrimaryKeyMixin / TimestampMixin / StoreOwnedMixin: 各表共用的列
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import JSON, DateTime, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

JSONType = JSON().with_variant(JSONB, "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_uuid() -> str:
    return str(uuid4())


class Base(DeclarativeBase):
    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class UUIDPrimaryKeyMixin:
    """字符串 UUID 主键，在应用侧生成，flush 前即可引用"""

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
    )


class TimestampMixin:
    """创建/更新时间，应用侧与数据库侧都给默认值"""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )


class StoreOwnedMixin:
    """
    归属店铺的外键

    店铺删除时，分类、商品、订单、同步日志随之级联删除
    """

    store_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("stores.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
