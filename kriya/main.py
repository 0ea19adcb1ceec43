"""
Kriya 多租户店铺 - 后端主入口

职责:
- 按子域名 / 自定义域名解析店铺（租户）
- 店铺前台目录读取（商品、分类、店铺配置）
- 店主后台：店铺、目录、订单管理
- Google Sheets 目录导入
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kriya.api import router as api_router
from kriya.api.v1.health import SERVICE_VERSION, health_payload
from kriya.core.cache import Clock
from kriya.core.config import Settings, get_settings
from kriya.core.errors import register_exception_handlers
from kriya.core.logging import get_logger, setup_logging
from kriya.database.engine import DataSource, create_data_source
from kriya.services.sheet_catalog import SheetCatalog
from kriya.services.sheets_client import GoogleSheetsClient
from kriya.services.store_service import CatalogService
from kriya.services.sync_service import CatalogImporter
from kriya.tenancy.cache import TenantCache, database_store_loader
from kriya.tenancy.middleware import PathnameMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理"""
    settings: Settings = app.state.settings
    setup_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    logger.info(
        "app_started",
        env=settings.ENV,
        mode="database" if app.state.data_source.is_configured else "demo",
        demo_sheet=app.state.sheet_catalog.is_configured,
    )
    yield
    await app.state.data_source.dispose()


def create_app(
    settings: Optional[Settings] = None,
    data_source: Optional[DataSource] = None,
    sheets_client: Optional[GoogleSheetsClient] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """
    创建 FastAPI 应用实例

    数据源、租户缓存、Demo 目录、导入器在这里构造一次，挂在 app.state 上；
    测试可注入数据源、表格客户端与时钟
    """
    settings = settings or get_settings()
    data_source = data_source or create_data_source(settings)
    sheets_client = sheets_client or GoogleSheetsClient.from_settings(settings)

    app = FastAPI(
        title="Kriya Storefront",
        description="多租户店铺：租户解析 × 目录读取 × Google Sheets 导入",
        version=SERVICE_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    sheet_catalog = SheetCatalog(
        sheets_client,
        settings.DEMO_SHEET_ID,
        ttl_seconds=settings.SHEET_CACHE_TTL_SECONDS,
        clock=clock,
    )

    app.state.settings = settings
    app.state.data_source = data_source
    app.state.sheet_catalog = sheet_catalog
    app.state.tenant_cache = TenantCache(
        database_store_loader(data_source),
        ttl_seconds=settings.TENANT_CACHE_TTL_SECONDS,
        clock=clock,
    )
    app.state.catalog_service = CatalogService(data_source, sheet_catalog)
    app.state.importer = CatalogImporter(data_source, sheets_client)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(PathnameMiddleware)

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    @app.get("/health")
    async def health_check() -> dict:
        """健康检查端点"""
        return await health_payload(app.state.data_source)

    return app


app = create_app()
