"""
后台目录 API Schemas
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============ Category Schemas ============

class CategoryCreate(BaseModel):
    """创建分类"""
    name: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=200, description="缺省时由名称生成")
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=1000)
    sort_order: int = Field(0, description="排序")
    is_active: bool = True


class CategoryUpdate(BaseModel):
    """更新分类"""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=1000)
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class CategoryResponse(BaseModel):
    """分类响应"""
    id: str
    store_id: str
    name: str
    slug: str
    description: Optional[str]
    image_url: Optional[str]
    sort_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============ Product Schemas ============

class ProductCreate(BaseModel):
    """创建商品"""
    name: str = Field(..., min_length=1, max_length=300)
    slug: Optional[str] = Field(None, max_length=300, description="缺省时由名称生成")
    external_id: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    compare_at_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    category_id: Optional[str] = None
    in_stock: bool = True
    stock_quantity: Optional[int] = Field(None, ge=0)
    variants: Optional[List[Dict[str, Any]]] = None
    metadata: Optional[Dict[str, Any]] = None
    is_active: bool = True
    sort_order: int = 0

    def to_fields(self) -> Dict[str, Any]:
        data = self.model_dump()
        data["extra_data"] = data.pop("metadata")
        return data


class ProductUpdate(BaseModel):
    """更新商品"""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=300)
    slug: Optional[str] = Field(None, min_length=1, max_length=300)
    external_id: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    compare_at_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    images: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    category_id: Optional[str] = None
    in_stock: Optional[bool] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
    variants: Optional[List[Dict[str, Any]]] = None
    metadata: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None

    def changes(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        if "metadata" in data:
            data["extra_data"] = data.pop("metadata")
        return data


class ProductResponse(BaseModel):
    """商品响应"""
    id: str
    store_id: str
    external_id: Optional[str]
    name: str
    slug: str
    description: Optional[str]
    price: float
    compare_at_price: Optional[float]
    images: List[str]
    tags: List[str]
    category_id: Optional[str]
    in_stock: bool
    stock_quantity: Optional[int]
    variants: Optional[List[Dict[str, Any]]]
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="extra_data")
    is_active: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
