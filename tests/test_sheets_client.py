"""
Google Sheets Client 测试
"""

import httpx
import pytest

from kriya.core.errors import SheetFetchError
from kriya.services.sheets_client import GoogleSheetsClient
from tests.conftest import SHEETS_BASE_URL


async def test_get_values(fake_sheets, sheets_client):
    fake_sheets.set_rows("sheet-1", "Products!A2:I", [["p1", "Tee", "", "10"]])

    values = await sheets_client.get_values("sheet-1", "Products!A2:I")

    assert values == [["p1", "Tee", "", "10"]]
    request = fake_sheets.requests[0]
    assert request.url.params["key"] == "test-key"
    assert request.url.path.endswith("/spreadsheets/sheet-1/values/Products!A2:I")


async def test_empty_range_returns_empty_list(fake_sheets, sheets_client):
    fake_sheets.set_rows("sheet-1", "Categories!A2:D", [])

    assert await sheets_client.get_values("sheet-1", "Categories!A2:D") == []


async def test_timeout_is_retryable(fake_sheets, sheets_client):
    fake_sheets.exc = httpx.ReadTimeout("slow")

    with pytest.raises(SheetFetchError) as exc_info:
        await sheets_client.get_values("sheet-1", "Products!A2:I")

    assert exc_info.value.retryable is True


async def test_connection_error_is_retryable(fake_sheets, sheets_client):
    fake_sheets.exc = httpx.ConnectError("refused")

    with pytest.raises(SheetFetchError) as exc_info:
        await sheets_client.get_values("sheet-1", "Products!A2:I")

    assert exc_info.value.retryable is True


@pytest.mark.parametrize("status_code,retryable", [(429, True), (503, True), (403, False), (404, False)])
async def test_http_errors(fake_sheets, sheets_client, status_code, retryable):
    fake_sheets.status_code = status_code

    with pytest.raises(SheetFetchError) as exc_info:
        await sheets_client.get_values("sheet-1", "Products!A2:I")

    assert exc_info.value.retryable is retryable
    assert f"HTTP {status_code}" in exc_info.value.message


async def test_missing_api_key(fake_sheets):
    client = GoogleSheetsClient(
        api_key="",
        base_url=SHEETS_BASE_URL,
        transport=httpx.MockTransport(fake_sheets.handler),
    )

    assert client.is_configured is False
    with pytest.raises(SheetFetchError):
        await client.get_values("sheet-1", "Products!A2:I")
    assert fake_sheets.requests == []


@pytest.mark.parametrize(
    "body",
    [
        b"<html>captive portal</html>",
        b"[]",
        b'{"values": "A1"}',
        b'{"values": ["p1", "Tee"]}',
    ],
)
async def test_unexpected_body_is_not_retryable(fake_sheets, sheets_client, body):
    fake_sheets.raw_body = body

    with pytest.raises(SheetFetchError) as exc_info:
        await sheets_client.get_values("sheet-1", "Products!A2:I")

    assert exc_info.value.retryable is False
