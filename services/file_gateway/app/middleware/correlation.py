"""Correlation ID middleware for request tracing."""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from shared.utils.logging import set_correlation_id


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Middleware to handle correlation IDs for request tracing."""

    CORRELATION_ID_HEADER = "X-Correlation-ID"

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        """Bind the caller's correlation ID, or a new one, for this request."""
        correlation_id = set_correlation_id(request.headers.get(self.CORRELATION_ID_HEADER))
        request.state.correlation_id = correlation_id

        response = await call_next(request)

        response.headers[self.CORRELATION_ID_HEADER] = correlation_id
        return response
