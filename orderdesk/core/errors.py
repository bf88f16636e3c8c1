"""
Domain error taxonomy.

Every error the service layer raises on purpose is an ``OrderDeskError``
tagged with an ``ErrorKind``. The kind alone decides the HTTP status and
the machine-readable code; the subclasses only exist to build messages.
"""
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Closed set of error kinds with their HTTP status codes."""

    VALIDATION = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    BUSINESS = "BUSINESS_ERROR"
    PAYMENT = "PAYMENT_ERROR"
    DATABASE = "DATABASE_ERROR"

    @property
    def code(self) -> str:
        return self.value

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self]


_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.BUSINESS: 422,
    ErrorKind.PAYMENT: 402,
    ErrorKind.DATABASE: 500,
}


class OrderDeskError(Exception):
    """Base class for typed domain errors."""

    kind: ErrorKind

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    @property
    def code(self) -> str:
        return self.kind.code

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the ``error`` object of the response envelope."""
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.code}: {self.message}>"


class ValidationError(OrderDeskError):
    """Request input failed validation."""

    def __init__(self, details: list[dict[str, Any]]) -> None:
        super().__init__(ErrorKind.VALIDATION, "Validation failed", details)


class NotFoundError(OrderDeskError):
    """A requested resource does not exist."""

    def __init__(self, resource: str, resource_id: Optional[str] = None) -> None:
        message = f"{resource} with id {resource_id} not found" if resource_id else f"{resource} not found"
        super().__init__(ErrorKind.NOT_FOUND, message)
        self.resource = resource
        self.resource_id = resource_id


class BusinessError(OrderDeskError):
    """A business rule was violated."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.BUSINESS, message)


class PaymentError(OrderDeskError):
    """The payment gateway refused to process the request."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.PAYMENT, message)


class DatabaseError(OrderDeskError):
    """Wraps an unexpected persistence failure."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.DATABASE, message)
