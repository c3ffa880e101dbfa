"""Shared Pydantic schemas for file gateway services."""

from shared.schemas.api_responses import APIResponse, ErrorResponse

__all__ = [
    "APIResponse",
    "ErrorResponse",
]
