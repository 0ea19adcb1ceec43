"""
Kriya 店铺服务配置

全部取自环境变量（或 .env），DATABASE_URL 为空即进入 Demo 模式
"""

from functools import lru_cache
from typing import Dict, List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """服务配置"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # 基础配置
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # 服务配置
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # 数据库配置（未配置时以 Demo 模式运行，只提供示例数据）
    DATABASE_URL: Optional[str] = None

    # 数据库连接池配置
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 分钟
    DB_STATEMENT_TIMEOUT_SECONDS: int = 15

    # 多租户解析
    BASE_DOMAIN: str = "kriya.store"
    LOCAL_HOST_PATTERNS: List[str] = ["localhost", "127.0.0.1"]
    TENANT_CACHE_TTL_SECONDS: float = 60.0

    # Google Sheets
    GOOGLE_SHEETS_API_KEY: str = ""
    GOOGLE_SHEETS_BASE_URL: str = "https://sheets.googleapis.com/v4"
    GOOGLE_SHEETS_TIMEOUT_SECONDS: float = 15.0
    SHEET_CACHE_TTL_SECONDS: float = 60.0
    # Demo 店铺的数据表（可选）
    DEMO_SHEET_ID: str = ""

    # 外部认证服务签发的 JWT
    AUTH_JWT_SECRET: str = "your-super-secret-jwt-key-change-in-production"
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_AUDIENCE: Optional[str] = None

    # CORS 配置
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # 套餐店铺数量上限（None 表示不限）
    PLAN_STORE_LIMITS: Dict[str, Optional[int]] = {
        "free": 1,
        "starter": 3,
        "pro": 10,
        "enterprise": None,
    }

    # 批量同步并发数
    SYNC_CONCURRENCY: int = 2

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    @property
    def database_configured(self) -> bool:
        return bool(self.DATABASE_URL)

    @property
    def sheets_configured(self) -> bool:
        return bool(self.GOOGLE_SHEETS_API_KEY)


@lru_cache
def get_settings() -> Settings:
    """进程内只加载一次"""
    return Settings()


settings = get_settings()
