"""
访问日志中间件（纯 ASGI，仅记录 HTTP 请求）
"""
import time

from starlette.types import ASGIApp, Receive, Scope, Send

from core.logging_config import get_logger


logger = get_logger(__name__)


class AccessLogMiddleware:
    """记录方法、路径、状态码与耗时；WebSocket 连接由会话自身记录。"""

    SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http" or scope["path"] in self.SKIP_PATHS:
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                status = message["status"]
                log = logger.warning if status >= 500 else logger.info
                log(
                    "request_completed",
                    method=scope["method"],
                    path=scope["path"],
                    status=status,
                    duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                )
            await send(message)

        await self.app(scope, receive, send_wrapper)
