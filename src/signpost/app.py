"""
ASGI application for Signpost.
Serves a route table, creating a fresh router for every request.
"""

from collections.abc import Callable
from typing import Any

from signpost.controllers import ControllerRegistry
from signpost.middleware import ErrorHandlerMiddleware, Middleware, MiddlewareStack
from signpost.request import Request
from signpost.response import TextResponse
from signpost.routes import RouteTable
from signpost.routing import Router
from signpost.types import Handler, Receive, RouteMap, Scope, Send


class Signpost:
    """
    The Signpost ASGI application.

    The route table is shared by all requests; the routing state of a
    request lives in its own :class:`Router`.

    Usage:
        app = Signpost({"/": home})

        @app.route("/users/#:id")
        def show_user(id):
            return {"id": id}

        # Run with: uvicorn main:app
    """

    def __init__(
        self,
        routes: RouteMap | None = None,
        *,
        base: str = "",
        controllers: ControllerRegistry | None = None,
        document_root: str | None = None,
        debug: bool = False,
    ) -> None:
        self.debug = debug
        self.base = base
        self.document_root = document_root
        self.controllers = controllers if controllers is not None else ControllerRegistry()
        self.routes = RouteTable(routes)

        self._middleware_stack = MiddlewareStack()

        # Add default error handler
        self._middleware_stack.add(ErrorHandlerMiddleware, debug=debug)

    # -------------------------------------------------------------------------
    # ASGI Interface
    # -------------------------------------------------------------------------

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI application entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        request = Request(scope)
        router = self.create_router(request)
        handler = self._middleware_stack.build(router)

        response = handler(request, TextResponse(None, status_code=200))
        await response(send)

    def create_router(self, request: Request | None = None) -> Router:
        """Create the router for a single request."""
        return Router(
            self.routes,
            request=request,
            base=self.base,
            controllers=self.controllers,
            document_root=self.document_root,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()

            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -------------------------------------------------------------------------
    # Routing
    # -------------------------------------------------------------------------

    def add_routes(self, routes: RouteMap, root: str | None = None) -> None:
        """Add routes; keys that already exist are skipped with a warning."""
        self.routes.add(routes, root)

    def route(self, pattern: str | int, **options: Any) -> Callable[[Handler], Handler]:
        """
        Decorator registering a callback route.
        Extra options (``methods``, ``args``, static fields) go into the descriptor.
        """
        def decorator(handler: Handler) -> Handler:
            self.routes.add({pattern: {"fn": handler, **options}})
            return handler
        return decorator

    # -------------------------------------------------------------------------
    # Middleware
    # -------------------------------------------------------------------------

    def add_middleware(self, middleware_class: type[Middleware], **options: Any) -> None:
        """Add middleware; the first added is the outermost."""
        self._middleware_stack.add(middleware_class, **options)

    def run(
        self,
        host: str = "localhost",
        port: int = 8000,
        reload: bool = False,
        workers: int = 1,
        log_level: str = "info",
    ) -> None:
        """
        Run the application using uvicorn.

        Args:
            host: Host to bind to.
            port: Port to bind to.
            reload: Enable auto-reload.
            workers: Number of worker processes.
            log_level: Logging level.
        """
        import uvicorn

        uvicorn.run(
            self,
            host=host,
            port=port,
            reload=reload,
            workers=workers,
            log_level=log_level,
        )
