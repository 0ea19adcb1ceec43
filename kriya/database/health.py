"""
数据库健康检查
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy import text

from kriya.database.base import utcnow
from kriya.database.engine import DataSource

_VERSION_QUERIES = {
    "postgresql": "SELECT version()",
    "sqlite": "SELECT sqlite_version()",
}


@dataclass
class DBHealthStatus:
    """数据库健康状态"""

    status: str
    latency_ms: float = 0.0
    version: Optional[str] = None
    error: Optional[str] = None
    checked_at: datetime = field(default_factory=utcnow)

    @property
    def healthy(self) -> bool:
        # Demo 模式下服务本身可用
        return self.status in ("healthy", "not_configured")

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "latency_ms": self.latency_ms,
            "version": self.version,
            "error": self.error,
            "checked_at": self.checked_at.isoformat(),
        }


async def check_db_health(data_source: DataSource) -> DBHealthStatus:
    """
    检查数据库健康状态

    未配置数据库时返回 not_configured
    """
    if not data_source.is_configured:
        return DBHealthStatus(status="not_configured")

    start = time.perf_counter()
    query = _VERSION_QUERIES.get(data_source.dialect_name, "SELECT 1")

    try:
        async with data_source.session() as session:
            result = await session.execute(text(query))
            version = result.scalar()
    except Exception as e:
        return DBHealthStatus(
            status="unhealthy",
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            error=str(e),
        )

    return DBHealthStatus(
        status="healthy",
        latency_ms=round((time.perf_counter() - start) * 1000, 2),
        version=str(version) if version is not None else None,
    )
