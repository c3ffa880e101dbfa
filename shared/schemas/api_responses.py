"""Standard API response envelopes."""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper.

    Routes serialize with ``exclude_none`` so an acknowledgement without a
    payload renders as ``{"success": true}``.
    """

    success: bool = True
    data: Optional[T] = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    success: bool = False
    error_code: str
    error_message: str
    details: Optional[dict[str, Any]] = None
    correlation_id: Optional[str] = None
