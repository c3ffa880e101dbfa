"""Client-facing API errors."""

from fastapi import status


class GatewayError(Exception):
    """Request error rendered as an ErrorResponse with its own status code."""

    def __init__(
        self,
        error_code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
