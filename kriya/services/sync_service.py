"""
Google Sheets 目录导入服务

把店铺表格中的分类 / 商品整体替换到数据库：
1. 写入 running 状态的 SyncLog
2. 读取分类行并解析
3. 替换分类（删除后批量插入，单个事务）
4. 重新读取分类，得到 slug → id 映射
5. 读取商品行并解析
6. 替换商品（单个事务）
7. 更新店铺最后同步时间
8. SyncLog → completed

2-7 任一步失败即中止，SyncLog → failed；已提交的步骤不回滚。
同一店铺的同步串行执行：进程内锁 + PostgreSQL advisory lock，
并发请求直接拒绝（SyncInProgress）。
"""

import asyncio
import hashlib
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import AsyncIterator, Dict, List, Optional, Tuple

from sqlalchemy import delete, select, text, update

from kriya.core.errors import BackendUnavailable, SheetFetchError, SyncInProgress
from kriya.core.logging import get_logger
from kriya.database.base import utcnow
from kriya.database.engine import DataSource
from kriya.database.models import Category, Product, Store, SyncLog, SyncStatus
from kriya.domain.storefront import StoreRecord
from kriya.services.sheet_rows import (
    CATEGORY_RANGE,
    PRODUCT_RANGE,
    CategoryRow,
    Parsed,
    ProductRow,
    Skipped,
    parse_category_row,
    parse_product_row,
)
from kriya.services.sheets_client import GoogleSheetsClient

logger = get_logger(__name__)

NO_SHEET_MESSAGE = "No Google Sheet configured for this store"

_CENT = Decimal("0.01")


@dataclass
class SyncResult:
    """单次导入结果"""

    success: bool
    products_count: int = 0
    categories_count: int = 0
    error: Optional[str] = None
    retryable: bool = False
    rows_skipped: int = 0
    sync_log_id: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "success": self.success,
            "productsCount": self.products_count,
            "categoriesCount": self.categories_count,
        }
        if self.error:
            data["error"] = self.error
            data["retryable"] = self.retryable
        return data


def advisory_lock_key(store_id: str) -> int:
    """店铺 ID → 64 位有符号整数（pg advisory lock 的键）"""
    digest = hashlib.blake2b(store_id.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big", signed=True)


def _money(value: Optional[float]) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value)).quantize(_CENT)


def collect_categories(rows: List[List[str]], log) -> Tuple[List[CategoryRow], int]:
    """解析分类行，重复 slug 只保留第一行；返回 (记录, 跳过行数)"""
    records: List[CategoryRow] = []
    seen_slugs = set()
    skipped = 0

    for index, row in enumerate(rows, start=2):
        result = parse_category_row(row)
        if isinstance(result, Parsed) and result.record.slug in seen_slugs:
            result = Skipped(f"duplicate slug {result.record.slug}")
        if not isinstance(result, Parsed):
            skipped += 1
            log.info("category_row_skipped", row=index, kind=type(result).__name__, reason=result.reason)
            continue
        seen_slugs.add(result.record.slug)
        records.append(result.record)

    return records, skipped


def collect_products(rows: List[List[str]], log) -> Tuple[List[ProductRow], int]:
    """解析商品行，重复 external_id 只保留第一行；返回 (记录, 跳过行数)"""
    records: List[ProductRow] = []
    seen_ids = set()
    skipped = 0

    for index, row in enumerate(rows, start=2):
        result = parse_product_row(row)
        if isinstance(result, Parsed) and result.record.external_id in seen_ids:
            result = Skipped(f"duplicate id {result.record.external_id}")
        if not isinstance(result, Parsed):
            skipped += 1
            log.info("product_row_skipped", row=index, kind=type(result).__name__, reason=result.reason)
            continue
        seen_ids.add(result.record.external_id)
        records.append(result.record)

    return records, skipped


class CatalogImporter:
    """
    目录导入器

    每个进程构造一次（持有各店铺的进程内锁）
    """

    def __init__(self, data_source: DataSource, sheets_client: GoogleSheetsClient):
        self.data_source = data_source
        self.sheets_client = sheets_client
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, store_id: str) -> asyncio.Lock:
        lock = self._locks.get(store_id)
        if lock is None:
            lock = self._locks[store_id] = asyncio.Lock()
        return lock

    def is_running(self, store_id: str) -> bool:
        lock = self._locks.get(store_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def _advisory_lock(self, store_id: str) -> AsyncIterator[None]:
        """跨进程互斥（仅 PostgreSQL），会话级锁需在同一连接上释放"""
        if self.data_source.dialect_name != "postgresql":
            yield
            return

        key = advisory_lock_key(store_id)
        async with self.data_source.engine.connect() as conn:
            acquired = (
                await conn.execute(text("SELECT pg_try_advisory_lock(:key)"), {"key": key})
            ).scalar()
            await conn.commit()
            if not acquired:
                raise SyncInProgress("A sync is already running for this store")
            try:
                yield
            finally:
                await conn.execute(text("SELECT pg_advisory_unlock(:key)"), {"key": key})
                await conn.commit()

    async def sync(self, store: StoreRecord) -> SyncResult:
        """
        同步店铺表格

        Raises:
            BackendUnavailable: 未配置数据库
            SyncInProgress: 该店铺已有同步在执行
        """
        if not self.data_source.is_configured:
            raise BackendUnavailable("Database not configured. Running in demo mode.")
        if not store.google_sheet_id:
            return SyncResult(success=False, error=NO_SHEET_MESSAGE)

        lock = self._lock_for(store.id)
        if lock.locked():
            raise SyncInProgress("A sync is already running for this store")

        try:
            async with lock:
                async with self._advisory_lock(store.id):
                    return await self._run(store)
        finally:
            if not lock.locked() and self._locks.get(store.id) is lock:
                del self._locks[store.id]

    async def _run(self, store: StoreRecord) -> SyncResult:
        log = logger.bind(store_id=store.id, slug=store.slug, sheet_id=store.google_sheet_id)
        started = time.monotonic()

        async with self.data_source.session() as session:
            sync_log = SyncLog(store_id=store.id, status=SyncStatus.RUNNING.value)
            session.add(sync_log)
            await session.commit()
        log = log.bind(sync_log_id=sync_log.id)
        log.info("sync_started")

        categories: List[CategoryRow] = []
        products: List[ProductRow] = []
        skipped = 0

        try:
            category_rows = await self.sheets_client.get_values(store.google_sheet_id, CATEGORY_RANGE)
            categories, skipped_categories = collect_categories(category_rows, log)
            skipped += skipped_categories

            await self._replace_categories(store.id, categories)
            slug_to_id = await self._category_ids(store.id)

            product_rows = await self.sheets_client.get_values(store.google_sheet_id, PRODUCT_RANGE)
            products, skipped_products = collect_products(product_rows, log)
            skipped += skipped_products

            await self._replace_products(store.id, products, slug_to_id)

            async with self.data_source.session() as session:
                await session.execute(
                    update(Store).where(Store.id == store.id).values(google_sheet_last_sync=utcnow())
                )
                await session.commit()

        except Exception as e:
            duration_ms = int((time.monotonic() - started) * 1000)
            retryable = isinstance(e, SheetFetchError) and e.retryable
            message = e.message if isinstance(e, SheetFetchError) else str(e)
            log.error("sync_failed", error=message, retryable=retryable, duration_ms=duration_ms)
            await self._finish_log(
                sync_log.id,
                status=SyncStatus.FAILED,
                error_message=message,
                duration_ms=duration_ms,
                rows_skipped=skipped,
            )
            return SyncResult(
                success=False,
                error=message,
                retryable=retryable,
                rows_skipped=skipped,
                sync_log_id=sync_log.id,
            )

        duration_ms = int((time.monotonic() - started) * 1000)
        await self._finish_log(
            sync_log.id,
            status=SyncStatus.COMPLETED,
            products_synced=len(products),
            categories_synced=len(categories),
            duration_ms=duration_ms,
            rows_skipped=skipped,
        )
        log.info(
            "sync_completed",
            products=len(products),
            categories=len(categories),
            rows_skipped=skipped,
            duration_ms=duration_ms,
        )
        return SyncResult(
            success=True,
            products_count=len(products),
            categories_count=len(categories),
            rows_skipped=skipped,
            sync_log_id=sync_log.id,
        )

    async def _replace_categories(self, store_id: str, records: List[CategoryRow]) -> None:
        async with self.data_source.session() as session:
            async with session.begin():
                await session.execute(delete(Category).where(Category.store_id == store_id))
                session.add_all(
                    Category(
                        store_id=store_id,
                        name=record.name,
                        slug=record.slug,
                        image_url=record.image_url,
                        sort_order=index,
                        is_active=True,
                    )
                    for index, record in enumerate(records)
                )

    async def _category_ids(self, store_id: str) -> Dict[str, str]:
        async with self.data_source.session() as session:
            result = await session.execute(
                select(Category.slug, Category.id).where(Category.store_id == store_id)
            )
            return {slug: category_id for slug, category_id in result.all()}

    async def _replace_products(
        self,
        store_id: str,
        records: List[ProductRow],
        slug_to_id: Dict[str, str],
    ) -> None:
        async with self.data_source.session() as session:
            async with session.begin():
                await session.execute(delete(Product).where(Product.store_id == store_id))
                session.add_all(
                    Product(
                        store_id=store_id,
                        external_id=record.external_id,
                        name=record.name,
                        slug=record.slug,
                        description=record.description,
                        price=_money(record.price),
                        compare_at_price=_money(record.compare_at_price),
                        images=record.images,
                        tags=record.tags,
                        category_id=slug_to_id.get(record.category_slug),
                        in_stock=record.in_stock,
                        is_active=True,
                        sort_order=index,
                    )
                    for index, record in enumerate(records)
                )

    async def _finish_log(self, sync_log_id: str, status: SyncStatus, **values) -> None:
        """SyncLog 进入终态（终态记录不再修改）"""
        async with self.data_source.session() as session:
            await session.execute(
                update(SyncLog)
                .where(SyncLog.id == sync_log_id, SyncLog.status == SyncStatus.RUNNING.value)
                .values(status=status.value, finished_at=utcnow(), **values)
            )
            await session.commit()


async def sync_all_stores(importer: CatalogImporter, concurrency: int = 2) -> Dict[str, int]:
    """
    同步所有配置了表格的启用店铺（供定时任务调用）

    Returns:
        {"total": 店铺数, "successful": 成功数, "failed": 失败数}
    """
    data_source = importer.data_source
    if not data_source.is_configured:
        logger.warning("sync_all_skipped", reason="database not configured")
        return {"total": 0, "successful": 0, "failed": 0}

    async with data_source.session() as session:
        result = await session.execute(
            select(Store)
            .where(Store.is_active.is_(True), Store.google_sheet_id.is_not(None))
            .order_by(Store.created_at)
        )
        stores = [StoreRecord.model_validate(s) for s in result.scalars().all()]

    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def run_one(store: StoreRecord) -> bool:
        async with semaphore:
            try:
                outcome = await importer.sync(store)
            except SyncInProgress:
                logger.warning("sync_all_store_busy", store_id=store.id)
                return False
            except Exception as e:
                logger.error("sync_all_store_error", store_id=store.id, error=str(e), exc_info=True)
                return False
            return outcome.success

    outcomes = await asyncio.gather(*(run_one(store) for store in stores))
    successful = sum(1 for ok in outcomes if ok)

    summary = {"total": len(stores), "successful": successful, "failed": len(stores) - successful}
    logger.info("sync_all_completed", **summary)
    return summary
