"""
Signpost - glob pattern request routing

Routes a request to a controller action, a callback or a file using
shell-glob style route patterns, binding URL values to handler
arguments by name.
"""

from signpost.app import Signpost
from signpost.binding import Parameter
from signpost.controllers import ControllerRegistry
from signpost.glob import Matcher, compile_pattern
from signpost.middleware import ErrorPageMiddleware, Middleware
from signpost.request import Request
from signpost.response import Response, TextResponse, JSONResponse, HTMLResponse, RedirectResponse
from signpost.routes import RouteDescriptor, RouteTable
from signpost.routing import ResolvedRoute, Router, RouteState

__version__ = "0.1.0"
__all__ = [
    "Signpost",
    "Parameter",
    "ControllerRegistry",
    "Matcher",
    "compile_pattern",
    "Middleware",
    "ErrorPageMiddleware",
    "Request",
    "Response",
    "TextResponse",
    "JSONResponse",
    "HTMLResponse",
    "RedirectResponse",
    "RouteDescriptor",
    "RouteTable",
    "ResolvedRoute",
    "Router",
    "RouteState",
]
