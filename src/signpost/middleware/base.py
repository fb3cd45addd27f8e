"""
Base middleware classes for Signpost.
Implements the Chain of Responsibility pattern.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeAlias

from signpost.exceptions import InvalidArgument
from signpost.request import Request
from signpost.response import Response

if TYPE_CHECKING:
    from signpost.routing import Router

Next: TypeAlias = Callable[[Request, Response], Response]


class Middleware(ABC):
    """
    Abstract base middleware class.

    Middleware is called with the request, the response so far and the
    next handler in the chain, and returns a response. It can process the
    request and optionally pass it on to ``call_next``.
    """

    def __init__(self, router: "Router") -> None:
        self.router = router

    def __call__(self, request: Request, response: Response, call_next: Any) -> Response:
        if not callable(call_next):
            raise InvalidArgument("'call_next' should be callable")

        return self.process(request, response, call_next)

    @abstractmethod
    def process(self, request: Request, response: Response, call_next: Next) -> Response:
        """Process the request. Must be implemented by subclasses."""
        ...


class MiddlewareStack:
    """
    Manages a stack of middleware.
    The innermost handler is the router itself.
    """

    def __init__(self) -> None:
        self._middleware: list[type[Middleware]] = []
        self._middleware_options: list[dict[str, Any]] = []

    def __len__(self) -> int:
        return len(self._middleware)

    def add(self, middleware_class: type[Middleware], **options: Any) -> None:
        """Add middleware to the stack."""
        self._middleware.append(middleware_class)
        self._middleware_options.append(options)

    def build(self, router: "Router") -> Next:
        """Build the middleware chain around ``router.run``."""
        handler: Next = router.run

        # Apply middleware in reverse order so first added is outermost
        for middleware_class, options in zip(
            reversed(self._middleware),
            reversed(self._middleware_options),
        ):
            handler = _chain(middleware_class(router, **options), handler)

        return handler


def _chain(middleware: Middleware, call_next: Next) -> Next:
    def handler(request: Request, response: Response) -> Response:
        return middleware(request, response, call_next)
    return handler
