"""API middleware for DocForge."""

from docforge.api.middleware.logging import LoggingMiddleware

__all__ = [
    "LoggingMiddleware",
]
