"""
订单服务

后台订单查看与状态变更（下单不在本服务范围内，订单不删除）
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kriya.core.errors import NotFoundError, ValidationError
from kriya.core.logging import get_logger
from kriya.database.models import Order, OrderStatus, PaymentStatus, can_transition

logger = get_logger(__name__)


class OrderService:
    """订单服务"""

    def __init__(self, session: AsyncSession, store_id: str):
        self.session = session
        self.store_id = store_id

    async def list_orders(
        self,
        status: Optional[OrderStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Order]:
        """列出订单（新订单在前）"""
        query = select(Order).where(Order.store_id == self.store_id)
        if status:
            query = query.where(Order.status == status.value)

        query = query.order_by(Order.created_at.desc()).offset(offset).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_order(self, order_id: str) -> Order:
        result = await self.session.execute(
            select(Order).where(Order.id == order_id, Order.store_id == self.store_id)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise NotFoundError("Order not found")
        return order

    async def update_order(
        self,
        order_id: str,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
    ) -> Order:
        """
        更新订单状态 / 支付状态

        订单状态只能沿流程向后推进，非终态可取消；支付状态可任意设置

        Raises:
            NotFoundError: 订单不存在
            ValidationError: 非法的状态流转
        """
        order = await self.get_order(order_id)
        current = OrderStatus(order.status)

        if status is not None and status != current:
            if not can_transition(current, status):
                raise ValidationError(
                    f"Cannot change order status from {current.value} to {status.value}",
                    error_code="INVALID_STATUS_TRANSITION",
                )
            order.status = status.value

        if payment_status is not None:
            order.payment_status = payment_status.value

        await self.session.commit()
        logger.info(
            "order_updated",
            store_id=self.store_id,
            order_id=order_id,
            status=order.status,
            payment_status=order.payment_status,
        )
        return order
