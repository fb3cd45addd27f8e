"""
Routing system for Signpost.
Resolves a request to a route and dispatches it to the target.

Routes map a glob pattern to a controller action, a callback or a file:

    router = Router({
        "/": {"controller": "default"},
        "/users/#:id": {"fn": show_user},
        "/assets/**": {"file": "public/$2"},
        "404": not_found_page,
    })

The first pattern that matches, in registration order, wins.
"""

import inspect
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any

from signpost.binding import bind_arguments, call_bound, callable_name, parameters_of
from signpost.controllers import ControllerRegistry, action_method_name
from signpost.exceptions import RoutingError
from signpost.output import get_output_format, output_error
from signpost.request import Request
from signpost.response import (
    FileResponse,
    JSONResponse,
    RedirectResponse,
    Response,
    TextResponse,
)
from signpost.routes import RouteDescriptor, RouteTable
from signpost.types import Bindings, Handler, RouteMap
from signpost.url import normalize_url, rebase_url, split_url

logger = logging.getLogger("signpost.routing")

DEFAULT_METHOD: str = "GET"
DEFAULT_REDIRECT_CODE: int = 303


class RouteState(Enum):
    """State of the router's cached resolution."""

    UNCOMPUTED = "uncomputed"
    NO_MATCH = "no_match"
    MATCHED = "matched"


@dataclass(frozen=True, slots=True)
class ResolvedRoute:
    """
    A matched route: the descriptor with URL references bound, the
    pattern that matched and the captured values.
    """

    route: str
    descriptor: RouteDescriptor
    bindings: Mapping[str, str] = field(default_factory=dict)
    parts: tuple[str, ...] = ()

    @classmethod
    def build(
        cls,
        route: str,
        descriptor: RouteDescriptor,
        bindings: Bindings,
        parts: list[str],
    ) -> "ResolvedRoute":
        return cls(
            route=route,
            descriptor=descriptor.bind_parts(parts),
            bindings=MappingProxyType(dict(bindings)),
            parts=tuple(parts),
        )

    @property
    def kind(self) -> str | None:
        return self.descriptor.kind

    @property
    def values(self) -> Mapping[str, Any]:
        """All named values: bindings, then the route's static fields, then ``route``."""
        data: dict[str, Any] = dict(self.bindings)
        data.update(self.descriptor.as_dict())
        data["route"] = self.route
        return MappingProxyType(data)

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def overwrite(self, changes: Mapping[str, Any]) -> "ResolvedRoute":
        """Copy with descriptor fields overwritten."""
        return replace(self, descriptor=self.descriptor.replace(**changes))


class Router:
    """
    Request router.

    Holds the route table and the state of routing one request: the
    method, the URL, the webroot base and the cached resolution. Any
    setter invalidates the cached resolution.

    A :class:`RouteTable` passed in is shared, not copied; the router
    copies it before adding routes of its own.
    """

    def __init__(
        self,
        routes: RouteTable | RouteMap | None = None,
        *,
        request: Request | None = None,
        base: str = "",
        controllers: ControllerRegistry | None = None,
        document_root: str | None = None,
    ) -> None:
        self._routes: RouteTable = RouteTable()
        self._request = request
        self._method: str | None = None
        self._url: str | None = None
        self._base = base.rstrip("/")
        self._state = RouteState.UNCOMPUTED
        self._route: ResolvedRoute | None = None
        self.controllers = controllers if controllers is not None else ControllerRegistry()
        self.document_root = document_root

        if routes is not None:
            self.set_routes(routes)

    # -------------------------------------------------------------------------
    # Routes
    # -------------------------------------------------------------------------

    def set_routes(self, routes: RouteTable | RouteMap) -> "Router":
        """Replace all routes."""
        self._routes = routes if isinstance(routes, RouteTable) else RouteTable(routes)
        self._invalidate()
        return self

    def add_routes(self, routes: RouteMap, root: str | None = None) -> "Router":
        """Add routes; keys that already exist are skipped with a warning."""
        self._routes = self._routes.copy().add(routes, root)
        self._invalidate()
        return self

    def get_routes(self) -> RouteTable:
        return self._routes

    # -------------------------------------------------------------------------
    # Request state
    # -------------------------------------------------------------------------

    @property
    def request(self) -> Request | None:
        return self._request

    def set_method(self, method: str) -> "Router":
        self._method = method
        self._invalidate()
        return self

    def get_method(self) -> str:
        """The method to route, defaults to the request method."""
        if self._method is not None:
            return self._method
        return self._request.method if self._request is not None else DEFAULT_METHOD

    def set_base(self, base: str) -> "Router":
        """Set the webroot subdirectory that is stripped from URLs."""
        self._base = base.rstrip("/")
        self._invalidate()
        return self

    def get_base(self) -> str:
        return self._base

    def rebase(self, url: str) -> str:
        """Add the base path to a site-absolute URL."""
        return rebase_url(url, self._base)

    def set_url(self, url: str) -> "Router":
        self._url = url
        self._invalidate()
        return self

    def get_url(self) -> str:
        """The URL to route without query string, defaults to the request URL."""
        return normalize_url(self._raw_url())

    def get_url_part(self, i: int) -> str | None:
        """Part of the URL, starting at 1."""
        parts = split_url(self.get_url())
        return parts[i - 1] if 0 < i <= len(parts) else None

    def _raw_url(self) -> str:
        if self._url is not None:
            return self._url
        return self._request.target if self._request is not None else "/"

    def _invalidate(self) -> None:
        self._state = RouteState.UNCOMPUTED
        self._route = None

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    @property
    def state(self) -> RouteState:
        return self._state

    def is_used(self) -> bool:
        """Whether the route has been resolved since the last change."""
        return self._state is not RouteState.UNCOMPUTED

    def get_route(self) -> ResolvedRoute | None:
        """Get the matching route, ``None`` if no route matches."""
        if self._state is RouteState.UNCOMPUTED:
            path = normalize_url(self._raw_url(), self._base)
            self._route = self._resolve(self.get_method(), path)
            self._state = RouteState.NO_MATCH if self._route is None else RouteState.MATCHED

        return self._route

    def get(self, prop: str) -> Any:
        """Get a value of the matching route."""
        route = self.get_route()
        return route.get(prop) if route is not None else None

    def _resolve(self, method: str | None, path: str) -> ResolvedRoute | None:
        match = self._routes.resolve(method, path)
        if match is None:
            return None

        key, bindings = match
        return ResolvedRoute.build(key, self._routes[key], bindings, split_url(path))

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def route_to(
        self,
        route: ResolvedRoute | str | int,
        overwrite: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Execute the target of a route.

        ``route`` may also be a route key such as ``404``, which is looked up
        regardless of method constraints.

        Returns whatever the target returns, ``True`` for a controller
        action without a return value or ``False`` on failure.
        """
        if not isinstance(route, ResolvedRoute):
            # Keys are patterns, not URLs: a '?' is a wildcard, not a query
            resolved = self._resolve(None, "/" + str(route).lstrip("/"))
            if resolved is None:
                return False
            route = resolved

        if overwrite:
            route = route.overwrite(overwrite)

        if route.kind == "controller":
            return self._route_to_controller(route)
        if route.kind == "fn":
            return self._route_to_callback(route)
        if route.kind == "file":
            return self._route_to_file(route)

        logger.warning(
            "Failed to route using '%s': Neither 'controller', 'fn' or 'file' is set",
            route.route,
        )
        return False

    def _route_to_controller(self, route: ResolvedRoute) -> Any:
        cls = self.controllers.lookup(route.descriptor.controller)
        if cls is None:
            logger.debug("No controller class for '%s'", route.descriptor.controller)
            return False

        controller = cls(self)
        method = getattr(controller, action_method_name(route.descriptor.action), None)
        if not callable(method):
            logger.debug("No action '%s' on %s", route.descriptor.action, cls.__name__)
            return False
        if inspect.iscoroutinefunction(method):
            raise RoutingError(f"Action {callable_name(method)}() must not be a coroutine function")

        ret = self._invoke(method, route)
        return ret if ret is not None else True

    def _route_to_callback(self, route: ResolvedRoute) -> Any:
        if not callable(route.descriptor.fn):
            logger.warning("Failed to route using '%s': Invalid callback.", route.route)
            return False

        return self._invoke(route.descriptor.fn, route)

    def _route_to_file(self, route: ResolvedRoute) -> Any:
        try:
            return FileResponse(route.descriptor.file, base_directory=self.document_root)
        except (FileNotFoundError, ValueError) as exc:
            logger.warning("Failed to route using '%s': %s", route.route, exc)
            return False

    def _invoke(self, fn: Handler, route: ResolvedRoute) -> Any:
        args = route.descriptor.args
        if args is not None and not isinstance(args, Mapping):
            return fn(*args)

        params = route.descriptor.params
        if params is None:
            params = parameters_of(fn)

        values = bind_arguments(params, self._context(route), callable_name(fn))
        return call_bound(fn, params, values)

    def _context(self, route: ResolvedRoute) -> dict[str, Any]:
        """Values available to handler parameters by name."""
        context: dict[str, Any] = {"router": self}
        if self._request is not None:
            context["request"] = self._request

        context.update(route.values)

        if isinstance(route.descriptor.args, Mapping):
            context.update(route.descriptor.args)

        return context

    def execute(self) -> Any:
        """
        Execute the target of the matching route.

        Falls back to :meth:`not_found` when no route matches or the target
        fails.
        """
        route = self.get_route()
        ret = self.route_to(route) if route is not None else None

        # TODO: respond with 405 when the URL matches a route for another method
        if ret is None or ret is False:
            return self.not_found(None, 404)
        return ret

    def run(self, request: Request, response: Response) -> Response:
        """
        Route a request and return the response.

        Results that aren't a Response are wrapped, keeping the status
        code of the given response. The body is rendered before returning,
        so a result that can't be serialized raises inside the middleware chain.
        """
        self._request = request
        self.set_method(request.method)
        self.set_url(request.target)

        return self._to_response(self.execute(), response).prepare()

    def _to_response(self, result: Any, response: Response) -> Response:
        if isinstance(result, Response):
            return result
        if result is True:
            return response
        if isinstance(result, (str, bytes)):
            return TextResponse(result, status_code=response.status_code)
        return JSONResponse(result, status_code=response.status_code)

    # -------------------------------------------------------------------------
    # Redirects and errors
    # -------------------------------------------------------------------------

    def redirect(self, url: str, http_code: int = DEFAULT_REDIRECT_CODE) -> Response:
        """
        Redirect to another page.

        Use 301 (Moved Permanently), 303 (See Other) or 307 (Temporary Redirect).
        """
        if url.startswith("/") and not url.startswith("//"):
            url = self.rebase(url)

        return RedirectResponse(url, status_code=int(http_code))

    def bad_request(self, message: str, http_code: int = 400, **extra: Any) -> Any:
        """Respond with 400 Bad Request, or eg. 406 (Not Acceptable)."""
        ret = self._route_to_error(400, message, http_code, extra)
        return ret or self.output_error(http_code, message)

    def require_login(self) -> Any:
        """
        Route to 401, otherwise respond with 403 Forbidden.
        The 401 route itself is responsible for the status code.
        """
        return self.route_to(401) or self.forbidden()

    def forbidden(self, message: str | None = None, http_code: int = 403, **extra: Any) -> Any:
        ret = self._route_to_error(403, message, http_code, extra)
        if ret:
            return ret

        if message is None:
            message = "Sorry, you are not allowed to view this page"
        return self.output_error(http_code, message)

    def not_found(self, message: str | None = None, http_code: int = 404, **extra: Any) -> Any:
        """Respond with 404 Not Found, or eg. 405 or 410 (Gone)."""
        ret = self._route_to_error(404, message, http_code, extra)
        if ret:
            return ret

        if message is None:
            message = (
                "Sorry, this action isn't supported"
                if http_code == 405
                else "Sorry, this page does not exist"
            )
        return self.output_error(http_code, message)

    def error(self, message: str | None = None, http_code: int = 500, **extra: Any) -> Any:
        """Respond with a 5xx server error."""
        ret = self._route_to_error(500, message, http_code, extra)
        if ret:
            return ret

        if message is None:
            message = "Sorry, an unexpected error occured"
        return self.output_error(http_code, message)

    def _route_to_error(
        self,
        key: int,
        message: str | None,
        http_code: int,
        extra: Mapping[str, Any],
    ) -> Any:
        args = {"message": message, "http_code": http_code, **extra}
        return self.route_to(key, {"args": args})

    def get_output_format(self, request: Request | None = None) -> str:
        """Output format for errors; override for custom negotiation."""
        return get_output_format(request if request is not None else self._request)

    def output_error(
        self,
        http_code: int,
        message: str | object,
        format: str | None = None,
    ) -> Response:
        """Default error output; override for custom error pages."""
        return output_error(http_code, message, format or self.get_output_format())
