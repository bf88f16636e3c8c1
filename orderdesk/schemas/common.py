"""
Response envelope shared by every order endpoint.
"""
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Successful response: ``{success: true, data, message?}``."""

    success: bool = True
    data: DataT
    message: Optional[str] = None


class ErrorBody(BaseModel):
    """The ``error`` object of a failed response."""

    code: str
    message: str
    details: Optional[list[dict[str, Any]]] = None


class ErrorResponse(BaseModel):
    """Failed response: ``{success: false, error: {...}}``."""

    success: bool = False
    error: ErrorBody
