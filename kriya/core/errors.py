"""
错误分类与异常处理器

业务异常携带 HTTP 状态码与错误码，由 FastAPI 异常处理器统一渲染为：
    {"error": "<message>", "code": "<ERROR_CODE>"}

- ValidationError      → 400
- AuthError            → 401
- OwnershipError       → 403（含 PlanLimitExceeded）
- NotFoundError        → 404
- ConflictError        → 409（含 SyncInProgress）
- BackendUnavailable   → 503
- 其他未处理异常         → 500
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from kriya.core.logging import get_logger

logger = get_logger(__name__)


class StorefrontError(Exception):
    """业务异常基类"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "UNEXPECTED_ERROR"

    def __init__(self, message: str, error_code: str | None = None):
        self.message = message
        if error_code:
            self.error_code = error_code
        super().__init__(message)


class ValidationError(StorefrontError):
    """请求参数不合法"""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"


class AuthError(StorefrontError):
    """缺少或无效的登录凭证"""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"


class OwnershipError(StorefrontError):
    """已登录，但无权操作该资源"""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"


class PlanLimitExceeded(OwnershipError):
    """超出套餐的店铺数量上限"""

    error_code = "PLAN_LIMIT_EXCEEDED"


class NotFoundError(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"


class ConflictError(StorefrontError):
    """唯一键冲突"""

    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"


class SyncInProgress(ConflictError):
    """同一店铺已有同步任务在执行"""

    error_code = "SYNC_IN_PROGRESS"


class BackendUnavailable(StorefrontError):
    """存储或导入源未配置 / 不可用"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "BACKEND_UNAVAILABLE"


class SheetFetchError(StorefrontError):
    """读取 Google Sheets 失败"""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "SHEET_FETCH_FAILED"

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


async def _storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            path=request.url.path,
            error_code=exc.error_code,
            error=exc.message,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.error_code},
    )


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message, "code": ValidationError.error_code},
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "code": StorefrontError.error_code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """注册异常处理器"""
    app.add_exception_handler(StorefrontError, _storefront_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
