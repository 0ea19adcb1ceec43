"""
API Schemas
"""

from kriya.api.v1.schemas.catalog import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from kriya.api.v1.schemas.order import OrderResponse, OrderUpdate
from kriya.api.v1.schemas.store import (
    StoreCreate,
    StoreResponse,
    StoreUpdate,
    SyncLogResponse,
)

__all__ = [
    "CategoryCreate",
    "CategoryResponse",
    "CategoryUpdate",
    "ProductCreate",
    "ProductResponse",
    "ProductUpdate",
    "OrderResponse",
    "OrderUpdate",
    "StoreCreate",
    "StoreResponse",
    "StoreUpdate",
    "SyncLogResponse",
]
