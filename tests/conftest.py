"""
测试配置和 fixtures

- 每个测试使用独立的 SQLite 文件数据库（aiosqlite，开启外键约束）
- Google Sheets 由 httpx.MockTransport 模拟
- 租户缓存 / 表格缓存使用可手动推进的时钟
"""

from typing import Any, AsyncGenerator, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from kriya.core.config import Settings
from kriya.core.security import create_access_token
from kriya.database.base import Base
from kriya.database.engine import ConfiguredDataSource, DemoDataSource, build_session_maker
from kriya.database.models import Store
from kriya.domain.storefront import StoreRecord
from kriya.main import create_app
from kriya.services.sheets_client import GoogleSheetsClient

SHEETS_BASE_URL = "https://sheets.test/v4"


class FakeClock:
    """可手动推进的时钟"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSheets:
    """
    模拟 Sheets API

    sheets[spreadsheet_id][range] = rows；status / exc / raw_body 用于模拟失败
    """

    def __init__(self):
        self.sheets: Dict[str, Dict[str, List[List[str]]]] = {}
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.exc: Optional[Exception] = None
        self.fail_ranges: Dict[str, int] = {}
        self.raw_body: Optional[bytes] = None

    def set_rows(self, spreadsheet_id: str, range_: str, rows: List[List[str]]) -> None:
        self.sheets.setdefault(spreadsheet_id, {})[range_] = rows

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc

        path = request.url.path
        spreadsheet_id = path.split("/spreadsheets/", 1)[1].split("/", 1)[0]
        range_ = path.split("/values/", 1)[1]

        if range_ in self.fail_ranges:
            return httpx.Response(self.fail_ranges[range_], json={"error": {"message": "boom"}})
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": {"message": "boom"}})
        if self.raw_body is not None:
            return httpx.Response(200, content=self.raw_body)
        if spreadsheet_id not in self.sheets:
            return httpx.Response(404, json={"error": {"message": "Requested entity was not found."}})

        body: Dict[str, Any] = {"range": range_, "majorDimension": "ROWS"}
        rows = self.sheets[spreadsheet_id].get(range_)
        if rows:
            body["values"] = rows
        return httpx.Response(200, json=body)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_sheets() -> FakeSheets:
    return FakeSheets()


@pytest.fixture
def sheets_client(fake_sheets: FakeSheets) -> GoogleSheetsClient:
    return GoogleSheetsClient(
        api_key="test-key",
        base_url=SHEETS_BASE_URL,
        timeout=5.0,
        transport=httpx.MockTransport(fake_sheets.handler),
    )


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        ENV="test",
        DEBUG=False,
        DATABASE_URL="sqlite+aiosqlite://",
        GOOGLE_SHEETS_API_KEY="test-key",
        GOOGLE_SHEETS_BASE_URL=SHEETS_BASE_URL,
        DEMO_SHEET_ID="",
    )


@pytest_asyncio.fixture
async def data_source(tmp_path) -> AsyncGenerator[ConfiguredDataSource, None]:
    """创建测试数据源（每个测试一个 SQLite 文件）"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield ConfiguredDataSource(engine=engine, session_maker=build_session_maker(engine))

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(data_source: ConfiguredDataSource) -> AsyncGenerator[AsyncSession, None]:
    """用于断言的数据库会话"""
    async with data_source.session() as session:
        yield session


@pytest.fixture
def app(test_settings, data_source, sheets_client, clock):
    return create_app(
        settings=test_settings,
        data_source=data_source,
        sheets_client=sheets_client,
        clock=clock,
    )


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """创建测试客户端"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as ac:
        yield ac


@pytest_asyncio.fixture
async def demo_client(test_settings, sheets_client, clock) -> AsyncGenerator[AsyncClient, None]:
    """未配置数据库（Demo 模式）的测试客户端"""
    demo_app = create_app(
        settings=test_settings,
        data_source=DemoDataSource(),
        sheets_client=sheets_client,
        clock=clock,
    )
    async with AsyncClient(transport=ASGITransport(app=demo_app), base_url="http://localhost") as ac:
        yield ac


def auth_headers(owner_id: str) -> Dict[str, str]:
    """签发测试用的访问令牌"""
    return {"Authorization": f"Bearer {create_access_token(owner_id)}"}


async def create_store(data_source: ConfiguredDataSource, **values) -> StoreRecord:
    """直接写入一个店铺"""
    values.setdefault("owner_id", "owner-1")
    values.setdefault("name", values.get("slug", "Test Store").title())
    async with data_source.session() as session:
        store = Store(**values)
        session.add(store)
        await session.commit()
        return StoreRecord.model_validate(store)
