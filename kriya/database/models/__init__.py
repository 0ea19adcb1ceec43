"""
数据库模型

所有 SQLAlchemy 模型的统一导出
"""

from kriya.database.models.store import Store, StorePlan, StoreTheme
from kriya.database.models.catalog import Category, Product
from kriya.database.models.order import (
    Order,
    OrderStatus,
    PaymentStatus,
    can_transition,
)
from kriya.database.models.sync_log import SyncLog, SyncStatus

__all__ = [
    # Store
    "Store",
    "StorePlan",
    "StoreTheme",
    # Catalog
    "Category",
    "Product",
    # Order
    "Order",
    "OrderStatus",
    "PaymentStatus",
    "can_transition",
    # Sync
    "SyncLog",
    "SyncStatus",
]
