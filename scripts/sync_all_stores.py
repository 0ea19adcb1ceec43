#!/usr/bin/env python3
"""
店铺表格定时同步脚本

用于 cron / k8s CronJob 定时调用，同步所有配置了 Google Sheets 的启用店铺。

使用方式：
    # 同步全部店铺
    python scripts/sync_all_stores.py

    # 指定并发数
    python scripts/sync_all_stores.py --concurrency 4

    # 只同步一个店铺
    python scripts/sync_all_stores.py --slug acme

    # crontab 示例（每 15 分钟）
    */15 * * * * cd /app && python scripts/sync_all_stores.py >> /var/log/sync_stores.log 2>&1

环境变量：
    DATABASE_URL: 数据库连接串（必填）
    GOOGLE_SHEETS_API_KEY: Google Sheets API Key（必填）
    SYNC_CONCURRENCY: 默认并发数（默认 2）
"""

import argparse
import asyncio
import sys

from sqlalchemy import select

from kriya.core.config import settings
from kriya.core.logging import get_logger, setup_logging
from kriya.database.engine import create_data_source
from kriya.database.models import Store
from kriya.domain.storefront import StoreRecord
from kriya.services.sheets_client import GoogleSheetsClient
from kriya.services.sync_service import CatalogImporter, sync_all_stores

logger = get_logger("sync_all_stores")


async def sync_one(importer: CatalogImporter, slug: str) -> int:
    async with importer.data_source.session() as session:
        result = await session.execute(select(Store).where(Store.slug == slug))
        store = result.scalar_one_or_none()

    if store is None:
        logger.error("store_not_found", slug=slug)
        return 1

    outcome = await importer.sync(StoreRecord.model_validate(store))
    logger.info("sync_store_result", slug=slug, **outcome.to_dict())
    return 0 if outcome.success else 1


async def main() -> int:
    parser = argparse.ArgumentParser(description="店铺表格定时同步脚本")
    parser.add_argument(
        "--concurrency",
        type=int,
        default=settings.SYNC_CONCURRENCY,
        help=f"同时同步的店铺数（默认: {settings.SYNC_CONCURRENCY}）",
    )
    parser.add_argument(
        "--slug",
        default=None,
        help="只同步指定店铺",
    )
    args = parser.parse_args()

    setup_logging()

    if not settings.database_configured:
        logger.error("database_not_configured")
        return 1
    if not settings.sheets_configured:
        logger.error("sheets_api_key_not_configured")
        return 1

    data_source = create_data_source(settings)
    importer = CatalogImporter(data_source, GoogleSheetsClient.from_settings(settings))

    try:
        if args.slug:
            return await sync_one(importer, args.slug)

        summary = await sync_all_stores(importer, concurrency=args.concurrency)
        return 0 if summary["failed"] == 0 else 1
    except Exception as e:
        logger.exception("sync_cron_failed", error=str(e))
        return 1
    finally:
        await data_source.dispose()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
