"""
Middleware package.
"""
from orderdesk.middleware.error_handler import ErrorHandlerMiddleware, register_exception_handlers
from orderdesk.middleware.request_context import RequestContextMiddleware

__all__ = [
    "ErrorHandlerMiddleware",
    "RequestContextMiddleware",
    "register_exception_handlers",
]
