"""
健康检查 API
"""

from fastapi import APIRouter

from kriya.api.deps import DataSourceDep
from kriya.database.health import check_db_health

SERVICE_NAME = "kriya-storefront"
SERVICE_VERSION = "0.1.0"

router = APIRouter()


async def health_payload(data_source) -> dict:
    db_status = await check_db_health(data_source)
    return {
        "status": "healthy" if db_status.healthy else "unhealthy",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "mode": "database" if data_source.is_configured else "demo",
        "database": db_status.to_dict(),
    }


@router.get("")
async def health_check(data_source: DataSourceDep) -> dict:
    """
    健康检查

    返回服务和数据库状态（未配置数据库时为 not_configured）
    """
    return await health_payload(data_source)
