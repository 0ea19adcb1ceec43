"""
订单 API

店主查看订单、变更订单状态与支付状态
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from kriya.api.deps import DbSession, OwnedStore
from kriya.api.v1.schemas import OrderResponse, OrderUpdate
from kriya.database.models import Order, OrderStatus
from kriya.services.order_service import OrderService

router = APIRouter()


def get_order_service(db: DbSession, store: OwnedStore) -> OrderService:
    return OrderService(db, store.id)


@router.get("/{store_id}/orders", response_model=List[OrderResponse])
async def list_orders(
    service: OrderService = Depends(get_order_service),
    status: Optional[OrderStatus] = Query(None, description="按订单状态筛选"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> List[Order]:
    """获取订单列表"""
    return await service.list_orders(status=status, limit=limit, offset=skip)


@router.patch("/{store_id}/orders/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: str,
    data: OrderUpdate,
    service: OrderService = Depends(get_order_service),
) -> Order:
    """
    更新订单

    - 400: 非法的状态流转（终态不可变更，只能向后推进或取消）
    - 404: 订单不存在
    """
    return await service.update_order(
        order_id,
        status=data.status,
        payment_status=data.payment_status,
    )
