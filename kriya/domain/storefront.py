"""
店铺前台领域对象

- StoreRecord: 店铺快照（租户缓存中保存的就是它，而不是 ORM 实例）
- StoreConfig / ProductView / CategoryView: 前台 JSON 结构（camelCase）
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """前台输出模型：序列化为 camelCase，同时接受 snake_case 构造"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class StoreRecord(BaseModel):
    """店铺快照"""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    owner_id: str
    slug: str
    custom_domain: Optional[str] = None
    name: str
    tagline: Optional[str] = None
    logo_url: Optional[str] = None
    theme: str = "neon"
    currency: str = "USD"
    currency_symbol: str = "$"
    announcement: Optional[str] = None
    instagram_url: Optional[str] = None
    twitter_url: Optional[str] = None
    tiktok_url: Optional[str] = None
    google_sheet_id: Optional[str] = None
    google_sheet_last_sync: Optional[datetime] = None
    is_active: bool = True
    plan: str = "free"


class SocialLinks(CamelModel):
    instagram: Optional[str] = None
    twitter: Optional[str] = None
    tiktok: Optional[str] = None


class StoreConfig(CamelModel):
    """前台店铺配置（主题、币种等）"""

    name: str
    tagline: str = ""
    theme: str = "neon"
    logo: Optional[str] = None
    currency: str = "USD"
    currency_symbol: str = "$"
    announcement: Optional[str] = None
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    sheet_ref: Optional[str] = None


class ProductVariant(CamelModel):
    id: str
    name: str
    options: List[str] = Field(default_factory=list)
    price_modifier: Optional[float] = None


class ProductView(CamelModel):
    """前台商品"""

    id: str
    name: str
    description: str = ""
    price: float
    compare_at_price: Optional[float] = None
    images: List[str] = Field(default_factory=list)
    category: str = "uncategorized"
    tags: List[str] = Field(default_factory=list)
    in_stock: bool = True
    variants: Optional[List[ProductVariant]] = None


class CategoryView(CamelModel):
    """前台分类"""

    id: str
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None


def store_to_config(store: Optional[StoreRecord], demo_config: StoreConfig) -> StoreConfig:
    """店铺快照 → 前台配置；无店铺时使用 Demo 配置"""
    if store is None:
        return demo_config

    return StoreConfig(
        name=store.name,
        tagline=store.tagline or "",
        theme=store.theme,
        logo=store.logo_url,
        currency=store.currency,
        currency_symbol=store.currency_symbol,
        announcement=store.announcement,
        social_links=SocialLinks(
            instagram=store.instagram_url,
            twitter=store.twitter_url,
            tiktok=store.tiktok_url,
        ),
        sheet_ref=store.google_sheet_id,
    )


def parse_variants(raw: Any) -> Optional[List[ProductVariant]]:
    """解析商品规格 JSON，格式不符时忽略"""
    if not isinstance(raw, list):
        return None
    variants = []
    for item in raw:
        if isinstance(item, dict) and "id" in item and "name" in item:
            variants.append(ProductVariant.model_validate(item))
    return variants or None
