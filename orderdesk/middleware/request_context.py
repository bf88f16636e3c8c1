"""
Request context middleware for tracing and access logging.

Uses pure ASGI middleware (not BaseHTTPMiddleware) to avoid breaking
async generator dependencies like get_db_session().
"""
import time
import uuid

import structlog
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from orderdesk.core.logging import get_logger

logger = get_logger("orderdesk.access")

REQUEST_ID_HEADER = b"x-request-id"


class RequestContextMiddleware:
    """
    Tags each request with an ID and logs one line when it finishes.

    The ID comes from an incoming X-Request-ID header or is generated. It
    is bound to the structlog context together with method and path,
    echoed back in the response headers, and exposed on request.state.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = None
        for header_name, header_value in scope.get("headers", []):
            if header_name == REQUEST_ID_HEADER:
                request_id = header_value.decode("utf-8")
                break
        if not request_id:
            request_id = str(uuid.uuid4())

        method = scope.get("method", "")
        path = scope.get("path", "")

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=method,
            path=path,
        )

        scope.setdefault("state", {})
        scope["state"]["request_id"] = request_id

        status_code = 500
        started = time.perf_counter()

        async def send_with_request_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers = list(message.get("headers", []))
                headers.append([REQUEST_ID_HEADER, request_id.encode("utf-8")])
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            logger.info(
                "Request completed",
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
