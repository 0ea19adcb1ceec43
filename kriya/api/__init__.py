"""
API 路由模块

统一注册所有 API 路由
"""

from fastapi import APIRouter

from kriya.api.v1 import dashboard, health, orders, refresh, storefront, stores

router = APIRouter()

# 店铺前台（无需认证）
router.include_router(storefront.router, prefix="/store", tags=["storefront"])
router.include_router(refresh.router, prefix="/refresh", tags=["storefront"])

# 店主后台
router.include_router(stores.router, prefix="/stores", tags=["stores"])
router.include_router(dashboard.router, prefix="/stores", tags=["dashboard"])
router.include_router(orders.router, prefix="/stores", tags=["orders"])

router.include_router(health.router, prefix="/health", tags=["health"])
