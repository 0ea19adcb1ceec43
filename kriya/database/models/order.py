"""
订单模型

下单流程（结账）不在本服务范围内；本服务只负责后台查看与状态变更
"""

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kriya.database.base import (
    Base,
    JSONType,
    StoreOwnedMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)

if TYPE_CHECKING:
    from kriya.database.models.store import Store


class OrderStatus(str, Enum):
    """订单状态"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """支付状态（与订单状态相互独立）"""
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


# 正向流转顺序
ORDER_STATUS_FLOW = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
]

TERMINAL_ORDER_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """
    判断订单状态能否流转

    - 终态不可再变更
    - 非终态可随时取消
    - 其余只允许向后流转（可跳过中间状态）
    """
    if current in TERMINAL_ORDER_STATUSES:
        return False
    if target == OrderStatus.CANCELLED:
        return True
    return ORDER_STATUS_FLOW.index(target) > ORDER_STATUS_FLOW.index(current)


class Order(Base, UUIDPrimaryKeyMixin, TimestampMixin, StoreOwnedMixin):
    """订单（商品信息为下单时快照）"""

    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("store_id", "order_number", name="uq_orders_store_order_number"),
    )

    order_number: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=OrderStatus.PENDING.value, nullable=False, index=True
    )

    # 顾客信息
    customer_email: Mapped[str] = mapped_column(String(320), nullable=False)
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_phone: Mapped[Optional[str]] = mapped_column(String(50))
    shipping_address: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    billing_address: Mapped[Optional[dict]] = mapped_column(JSONType)

    # 商品快照
    items: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)

    # 金额
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    shipping_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)

    # 支付
    payment_status: Mapped[str] = mapped_column(
        String(20), default=PaymentStatus.PENDING.value, nullable=False
    )
    payment_method: Mapped[Optional[str]] = mapped_column(String(50))
    payment_id: Mapped[Optional[str]] = mapped_column(String(200))

    notes: Mapped[Optional[str]] = mapped_column(Text)
    extra_data: Mapped[Optional[dict]] = mapped_column("metadata", JSONType)

    store: Mapped["Store"] = relationship(back_populates="orders")

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, order_number={self.order_number}, status={self.status})>"
