"""
Google Sheets Client

通过 Sheets API v4 的 values.get 读取表格区域（API Key 认证）
"""

from typing import List, Optional
from urllib.parse import quote

import httpx

from kriya.core.config import Settings
from kriya.core.errors import SheetFetchError
from kriya.core.logging import get_logger

logger = get_logger(__name__)

_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class GoogleSheetsClient:
    """
    表格读取客户端

    超时与 429 / 5xx 视为可重试失败，其余 HTTP 错误为不可重试失败
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://sheets.googleapis.com/v4",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleSheetsClient":
        return cls(
            api_key=settings.GOOGLE_SHEETS_API_KEY,
            base_url=settings.GOOGLE_SHEETS_BASE_URL,
            timeout=settings.GOOGLE_SHEETS_TIMEOUT_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def get_values(self, spreadsheet_id: str, range_: str) -> List[List[str]]:
        """
        读取表格区域

        Args:
            spreadsheet_id: 表格 ID
            range_: A1 表示法区域，如 Products!A2:I

        Returns:
            行列表（空区域返回空列表）
        """
        log = logger.bind(spreadsheet_id=spreadsheet_id, range=range_)

        if not self.is_configured:
            raise SheetFetchError("Google Sheets API key not configured")

        url = (
            f"{self.base_url}/spreadsheets/{quote(spreadsheet_id, safe='')}"
            f"/values/{quote(range_, safe='!:')}"
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params={"key": self.api_key})
        except httpx.TimeoutException as e:
            log.warning("sheet_fetch_timeout", error=str(e))
            raise SheetFetchError(f"Timed out reading {range_}", retryable=True) from e
        except httpx.HTTPError as e:
            log.warning("sheet_fetch_error", error=str(e))
            raise SheetFetchError(f"Failed to read {range_}: {e}", retryable=True) from e

        if response.status_code != 200:
            retryable = response.status_code in _RETRYABLE_STATUS
            log.warning(
                "sheet_fetch_failed",
                status_code=response.status_code,
                response=response.text[:200],
                retryable=retryable,
            )
            raise SheetFetchError(
                f"Failed to read {range_}: HTTP {response.status_code}",
                retryable=retryable,
            )

        try:
            body = response.json()
        except ValueError as e:
            log.warning("sheet_fetch_invalid_body", response=response.text[:200])
            raise SheetFetchError(f"Failed to read {range_}: response is not JSON") from e

        values = (body.get("values") or []) if isinstance(body, dict) else None
        if not isinstance(values, list) or not all(isinstance(row, list) for row in values):
            log.warning("sheet_fetch_invalid_body", response=response.text[:200])
            raise SheetFetchError(f"Failed to read {range_}: unexpected response shape")

        log.debug("sheet_fetched", rows=len(values))
        return values
