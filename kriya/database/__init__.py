"""
数据库模块

提供 SQLAlchemy 2.0 异步数据库支持
"""

from kriya.database.base import (
    Base,
    JSONType,
    StoreOwnedMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from kriya.database.engine import (
    ConfiguredDataSource,
    DataSource,
    DemoDataSource,
    create_data_source,
    get_data_source,
    get_db,
)
from kriya.database.health import DBHealthStatus, check_db_health

__all__ = [
    # Base
    "Base",
    "JSONType",
    "StoreOwnedMixin",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    # Engine
    "ConfiguredDataSource",
    "DataSource",
    "DemoDataSource",
    "create_data_source",
    "get_data_source",
    "get_db",
    # Health
    "DBHealthStatus",
    "check_db_health",
]
