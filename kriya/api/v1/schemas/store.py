"""
店铺 API Schemas
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from kriya.database.models import StoreTheme


# ============ Store Schemas ============

class StoreCreate(BaseModel):
    """
    创建店铺

    请求体沿用前端的 camelCase（currencySymbol / sheetRef），同时接受 snake_case
    """
    name: Optional[str] = Field(None, max_length=100, description="店铺名称")
    slug: Optional[str] = Field(None, description="子域名标识，创建后不可修改")
    tagline: Optional[str] = Field(None, max_length=200)
    theme: Optional[StoreTheme] = Field(None, description="主题: neon/soft/brutal")
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    currency_symbol: Optional[str] = Field(
        None,
        max_length=8,
        validation_alias=AliasChoices("currencySymbol", "currency_symbol"),
    )
    sheet_ref: Optional[str] = Field(
        None,
        max_length=200,
        validation_alias=AliasChoices("sheetRef", "googleSheetId", "google_sheet_id", "sheet_ref"),
        description="Google Sheets 表格 ID",
    )


class StoreUpdate(BaseModel):
    """更新店铺设置（slug 不可修改，未知字段返回 400）"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    tagline: Optional[str] = Field(None, max_length=200)
    logo_url: Optional[str] = Field(None, max_length=500)
    theme: Optional[StoreTheme] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    currency_symbol: Optional[str] = Field(None, max_length=8)
    announcement: Optional[str] = None
    instagram_url: Optional[str] = Field(None, max_length=500)
    twitter_url: Optional[str] = Field(None, max_length=500)
    tiktok_url: Optional[str] = Field(None, max_length=500)
    google_sheet_id: Optional[str] = Field(None, max_length=200)
    custom_domain: Optional[str] = Field(None, max_length=253)
    is_active: Optional[bool] = None
    settings: Optional[Dict[str, Any]] = None

    def changes(self) -> Dict[str, Any]:
        """只返回请求中出现的字段"""
        data = self.model_dump(exclude_unset=True)
        if data.get("theme") is not None:
            data["theme"] = StoreTheme(data["theme"]).value
        return data


class StoreResponse(BaseModel):
    """店铺响应（与数据库行一致，snake_case）"""
    id: str
    owner_id: str
    slug: str
    custom_domain: Optional[str]
    name: str
    tagline: Optional[str]
    logo_url: Optional[str]
    theme: str
    currency: str
    currency_symbol: str
    announcement: Optional[str]
    instagram_url: Optional[str]
    twitter_url: Optional[str]
    tiktok_url: Optional[str]
    google_sheet_id: Optional[str]
    google_sheet_last_sync: Optional[datetime]
    is_active: bool
    plan: str
    settings: Dict[str, Any]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============ Sync Schemas ============

class SyncLogResponse(BaseModel):
    """同步记录"""
    id: str
    store_id: str
    status: str
    products_synced: int
    categories_synced: int
    rows_skipped: int
    error_message: Optional[str]
    duration_ms: Optional[int]
    created_at: datetime
    finished_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)
