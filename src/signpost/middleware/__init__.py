"""
Middleware package for Signpost.
"""

from signpost.middleware.base import Middleware, MiddlewareStack
from signpost.middleware.error_handler import ErrorHandlerMiddleware
from signpost.middleware.error_page import ErrorPageMiddleware
from signpost.middleware.logging import RequestLoggingMiddleware

__all__ = [
    "Middleware",
    "MiddlewareStack",
    "ErrorHandlerMiddleware",
    "ErrorPageMiddleware",
    "RequestLoggingMiddleware",
]
