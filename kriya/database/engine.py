"""
数据库引擎与数据源

生产环境走 asyncpg，测试用 aiosqlite

数据源在启动时确定一次：
- ConfiguredDataSource: 已配置 DATABASE_URL，持有引擎与会话工厂
- DemoDataSource: 未配置数据库，店铺前台只提供示例数据，后台接口返回 503

连接池参数取自 DB_POOL_*；SQLite 与测试环境改用 NullPool，
连接池开启 pool_pre_ping
"""

from dataclasses import dataclass
from typing import AsyncGenerator, ClassVar, Union

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool

from kriya.core.config import Settings
from kriya.core.errors import BackendUnavailable

DEMO_MODE_MESSAGE = "Database not configured. Running in demo mode."


class DemoDataSource:
    """未配置数据库时的数据源"""

    is_configured: ClassVar[bool] = False

    def session(self) -> AsyncSession:
        raise BackendUnavailable(DEMO_MODE_MESSAGE)

    async def dispose(self) -> None:
        return None


@dataclass
class ConfiguredDataSource:
    """已配置数据库的数据源"""

    engine: AsyncEngine
    session_maker: async_sessionmaker[AsyncSession]

    is_configured: ClassVar[bool] = True

    def session(self) -> AsyncSession:
        return self.session_maker()

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    async def dispose(self) -> None:
        await self.engine.dispose()


DataSource = Union[ConfiguredDataSource, DemoDataSource]


def _get_engine_options(settings: Settings, url: str) -> dict:
    """
    获取引擎参数

    - test / SQLite: 使用 NullPool（无连接池）
    - 其他环境: 按配置启用连接池，并为 asyncpg 设置语句超时
    """
    if settings.ENV == "test" or url.startswith("sqlite"):
        return {"poolclass": NullPool}

    options: dict = {
        "poolclass": AsyncAdaptedQueuePool,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,
    }
    if url.startswith("postgresql+asyncpg"):
        options["connect_args"] = {
            "server_settings": {
                "statement_timeout": str(settings.DB_STATEMENT_TIMEOUT_SECONDS * 1000),
            },
            "timeout": settings.DB_POOL_TIMEOUT,
        }
    return options


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """创建异步会话工厂"""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def create_data_source(settings: Settings) -> DataSource:
    """根据配置创建数据源（启动时调用一次）"""
    if not settings.database_configured:
        return DemoDataSource()

    url = settings.DATABASE_URL
    engine = create_async_engine(
        url,
        echo=settings.DEBUG and not settings.is_production,
        **_get_engine_options(settings, url),
    )
    return ConfiguredDataSource(engine=engine, session_maker=build_session_maker(engine))


def get_data_source(request: Request) -> DataSource:
    """获取当前应用的数据源"""
    return request.app.state.data_source


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    获取数据库会话依赖

    用于 FastAPI 路由的依赖注入；Demo 模式下抛出 BackendUnavailable（503）
    """
    data_source = get_data_source(request)
    async with data_source.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
