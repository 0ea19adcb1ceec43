"""
同步日志模型

记录每次 Google Sheets 导入的执行状态和结果；进入终态后不再修改
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kriya.database.base import Base, StoreOwnedMixin, UUIDPrimaryKeyMixin, utcnow

if TYPE_CHECKING:
    from kriya.database.models.store import Store


class SyncStatus(str, Enum):
    """同步任务状态"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_SYNC_STATUSES = {SyncStatus.COMPLETED.value, SyncStatus.FAILED.value}


class SyncLog(Base, UUIDPrimaryKeyMixin, StoreOwnedMixin):
    """单次导入记录（只追加）"""

    __tablename__ = "sync_logs"

    status: Mapped[str] = mapped_column(
        String(20),
        default=SyncStatus.PENDING.value,
        nullable=False,
        index=True,
    )

    # 统计
    products_synced: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    categories_synced: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rows_skipped: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    error_message: Mapped[Optional[str]] = mapped_column(Text)
    duration_ms: Mapped[Optional[int]] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    finished_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    store: Mapped["Store"] = relationship(back_populates="sync_logs")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_SYNC_STATUSES

    def __repr__(self) -> str:
        return f"<SyncLog(id={self.id}, store_id={self.store_id}, status={self.status})>"

    def to_dict(self) -> dict:
        """转换为字典"""
        return {
            "id": self.id,
            "store_id": self.store_id,
            "status": self.status,
            "products_synced": self.products_synced,
            "categories_synced": self.categories_synced,
            "rows_skipped": self.rows_skipped,
            "error_message": self.error_message,
            "duration_ms": self.duration_ms,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }
