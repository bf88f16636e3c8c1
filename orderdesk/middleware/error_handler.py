"""
Global error handling.

Typed domain errors, request validation failures and HTTP exceptions are
turned into the ``{success: false, error: {...}}`` envelope by FastAPI
exception handlers. Anything that still escapes is caught by a pure ASGI
middleware (not BaseHTTPMiddleware, which would break async generator
dependencies like get_db_session()).
"""
import json
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from orderdesk.core.errors import OrderDeskError
from orderdesk.core.logging import get_logger

logger = get_logger(__name__)

INTERNAL_ERROR_CODE = "INTERNAL_SERVER_ERROR"
INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"

# No route for this method and path; both answer as an unknown route
_UNMATCHED_ROUTE_STATUSES = frozenset({404, 405})

# Request parts FastAPI puts at the front of an error location
_LOCATION_ROOTS = {"body", "query", "path", "header", "cookie"}


def error_envelope(
    code: str,
    message: str,
    details: Optional[list[dict[str, Any]]] = None,
) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}


def _field_name(location: tuple) -> str:
    parts = list(location)
    if parts and parts[0] in _LOCATION_ROOTS:
        parts = parts[1:]
    return ".".join(str(part) for part in parts)


async def order_desk_error_handler(request: Request, exc: OrderDeskError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Request failed",
        code=exc.code,
        error=exc.message,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.to_dict()},
    )


async def request_validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {"field": _field_name(error.get("loc", ())), "message": error.get("msg", "Invalid value")}
        for error in exc.errors()
    ]
    logger.warning("Request validation failed", path=request.url.path, errors=len(details))
    return JSONResponse(
        status_code=400,
        content=error_envelope("VALIDATION_ERROR", "Validation failed", details),
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    if exc.status_code in _UNMATCHED_ROUTE_STATUSES:
        return JSONResponse(
            status_code=404,
            content=error_envelope("NOT_FOUND", f"Route {request.url.path} not found"),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope("HTTP_ERROR", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach every envelope-producing handler to the application."""
    app.add_exception_handler(OrderDeskError, order_desk_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)


class ErrorHandlerMiddleware:
    """
    Pure ASGI error handler that catches unhandled exceptions
    and returns the generic 500 envelope.

    Internal details are logged, never sent to the client.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            if response_started:
                # Headers already sent, can't change the response
                logger.exception(
                    "Unhandled exception after response started",
                    error=str(e),
                    path=scope.get("path", "unknown"),
                )
                raise

            logger.exception(
                "Unhandled exception",
                error=str(e),
                error_type=type(e).__name__,
                path=scope.get("path", "unknown"),
            )

            body = json.dumps(
                error_envelope(INTERNAL_ERROR_CODE, INTERNAL_ERROR_MESSAGE)
            ).encode("utf-8")

            await send({
                "type": "http.response.start",
                "status": 500,
                "headers": [
                    [b"content-type", b"application/json"],
                    [b"content-length", str(len(body)).encode()],
                ],
            })
            await send({
                "type": "http.response.body",
                "body": body,
            })
