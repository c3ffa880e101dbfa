"""Middleware components for the file gateway."""

from services.file_gateway.app.middleware.correlation import CorrelationMiddleware

__all__ = ["CorrelationMiddleware"]
