"""
Alembic 迁移环境

连接串取自 DATABASE_URL（asyncpg）；未配置时拒绝执行
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from kriya.core.config import settings
from kriya.database.base import Base

# 注册全部店铺相关表
import kriya.database.models  # noqa: F401

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

if not settings.DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set; migrations need a database")

DATABASE_URL = settings.DATABASE_URL


def _migrate(**options) -> None:
    context.configure(target_metadata=Base.metadata, compare_type=True, **options)
    with context.begin_transaction():
        context.run_migrations()


def _migrate_with_connection(connection: Connection) -> None:
    _migrate(connection=connection)


async def migrate_online() -> None:
    """连接数据库执行迁移"""
    engine = create_async_engine(DATABASE_URL, poolclass=NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate_with_connection)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    # 只输出 SQL
    _migrate(url=DATABASE_URL, literal_binds=True, dialect_opts={"paramstyle": "named"})
else:
    asyncio.run(migrate_online())
