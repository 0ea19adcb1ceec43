"""
请求路径中间件

把请求路径写入 x-pathname 请求头与响应头，供租户解析使用
- 上游（前台渲染层）已带 x-pathname 时保留原值
- 静态资源请求不处理
"""

import re

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

PATHNAME_HEADER = "x-pathname"

_ASSET_RE = re.compile(r"(^/favicon\.ico$)|(\.(svg|png|jpg|jpeg|gif|webp)$)", re.IGNORECASE)


class PathnameMiddleware:
    """ASGI 中间件"""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or _ASSET_RE.search(scope["path"]):
            await self.app(scope, receive, send)
            return

        headers = MutableHeaders(scope=scope)
        pathname = headers.get(PATHNAME_HEADER)
        if not pathname:
            pathname = scope["path"]
            headers[PATHNAME_HEADER] = pathname

        async def send_with_pathname(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[PATHNAME_HEADER] = pathname
            await send(message)

        await self.app(scope, receive, send_with_pathname)
