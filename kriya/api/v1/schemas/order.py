"""
订单 API Schemas
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from kriya.database.models import OrderStatus, PaymentStatus


class OrderUpdate(BaseModel):
    """更新订单状态"""

    model_config = ConfigDict(extra="forbid")

    status: Optional[OrderStatus] = Field(None, description="订单状态，只能向后流转或取消")
    payment_status: Optional[PaymentStatus] = Field(None, description="支付状态")


class OrderResponse(BaseModel):
    """订单响应"""
    id: str
    store_id: str
    order_number: str
    status: str
    customer_email: str
    customer_name: str
    customer_phone: Optional[str]
    shipping_address: Dict[str, Any]
    billing_address: Optional[Dict[str, Any]]
    items: List[Dict[str, Any]]
    subtotal: float
    shipping_cost: float
    tax: float
    total: float
    currency: str
    payment_status: str
    payment_method: Optional[str]
    payment_id: Optional[str]
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
