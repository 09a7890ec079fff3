"""msgdispatch middleware modules."""

from msgdispatch.middleware.logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
