"""Tests for signpost.app: ASGI integration."""

import json
import logging

import pytest

from signpost.app import Signpost
from signpost.controllers import ControllerRegistry
from signpost.exceptions import NotFound, RoutingError
from signpost.middleware import ErrorPageMiddleware, Middleware
from signpost.response import TextResponse

from tests.conftest import ResponseCapture, make_lifespan_receive, make_receive, make_scope


class TestRouteRegistration:
    def test_decorator_registers_route(self) -> None:
        app = Signpost()

        @app.route("/hello", methods=["GET"])
        def hello():
            return {"msg": "hi"}

        assert "/hello" in app.routes
        assert app.routes["/hello"].methods == frozenset({"GET"})

    def test_add_routes_warns_on_duplicate(self, caplog) -> None:
        app = Signpost({"/a": lambda: "a"})
        with caplog.at_level(logging.WARNING, logger="signpost.routing"):
            app.add_routes({"/a": lambda: "b"})
        assert "already defined" in caplog.text

    def test_async_route_rejected(self) -> None:
        app = Signpost()

        with pytest.raises(RoutingError, match="coroutine"):
            @app.route("/a")
            async def handler():
                return "never"

        assert "/a" not in app.routes

    def test_router_per_request_shares_table(self) -> None:
        app = Signpost({"/a": lambda: "a"})
        first, second = app.create_router(), app.create_router()
        assert first is not second
        assert first.get_routes() is second.get_routes() is app.routes


class TestASGI:
    @pytest.mark.asyncio
    async def test_json_handler(self) -> None:
        app = Signpost()

        @app.route("/users/#:id")
        def show(id, request):
            return {"id": id, "q": request.get_query("q")}

        cap = ResponseCapture()
        await app(make_scope(path="/users/42", query_string="q=x"), make_receive(), cap)

        assert cap.status == 200
        assert json.loads(cap.body) == {"id": "42", "q": "x"}
        assert "x-request-id" in cap.headers

    @pytest.mark.asyncio
    async def test_base(self) -> None:
        app = Signpost({"/about": lambda: "about"}, base="/site")
        cap = ResponseCapture()
        await app(make_scope(path="/site/about"), make_receive(), cap)
        assert cap.body == b"about"

    @pytest.mark.asyncio
    async def test_not_found_route(self) -> None:
        app = Signpost({"/": lambda: "home", "404": lambda: TextResponse("lost", 404)})
        cap = ResponseCapture()
        await app(make_scope(path="/nope"), make_receive(), cap)
        assert cap.status == 404
        assert cap.body == b"lost"

    @pytest.mark.asyncio
    async def test_not_found_default(self) -> None:
        app = Signpost({"/": lambda: "home"})
        cap = ResponseCapture()
        await app(
            make_scope(path="/nope", headers={"Accept": "application/json"}),
            make_receive(),
            cap,
        )
        assert cap.status == 404
        assert json.loads(cap.body)["status_code"] == 404

    @pytest.mark.asyncio
    async def test_http_exception_from_handler(self) -> None:
        def handler():
            raise NotFound("No such user")

        app = Signpost({"/users/#:id": handler})
        cap = ResponseCapture()
        await app(make_scope(path="/users/1"), make_receive(), cap)
        assert cap.status == 404
        assert cap.body == b"No such user"

    @pytest.mark.asyncio
    async def test_unserializable_result_is_500(self) -> None:
        app = Signpost({"/x": lambda: {1, 2}})
        cap = ResponseCapture()
        await app(make_scope(path="/x"), make_receive(), cap)
        assert cap.status == 500
        assert cap.body == b"Internal Server Error"
        assert "x-request-id" in cap.headers

    @pytest.mark.asyncio
    async def test_debug_shows_exception(self) -> None:
        app = Signpost({"/x": lambda: {1, 2}}, debug=True)
        cap = ResponseCapture()
        await app(make_scope(path="/x"), make_receive(), cap)
        assert cap.status == 500
        assert cap.body.startswith(b"TypeError: ")

    @pytest.mark.asyncio
    async def test_controller(self) -> None:
        controllers = ControllerRegistry()

        @controllers.register
        class PageController:
            def __init__(self, router):
                self.router = router

            def showAction(self, slug):
                return f"page {slug}"

        app = Signpost({"/pages/*:slug": {"controller": "page", "action": "show"}}, controllers=controllers)
        cap = ResponseCapture()
        await app(make_scope(path="/pages/intro"), make_receive(), cap)
        assert cap.body == b"page intro"

    @pytest.mark.asyncio
    async def test_error_page_middleware(self) -> None:
        class Deny(Middleware):
            def process(self, request, response, call_next):
                return call_next(request, TextResponse(None, status_code=403))

        app = Signpost({"403": lambda: "Members only", "/**": lambda: "secret"})
        app.add_middleware(Deny)
        app.add_middleware(ErrorPageMiddleware)

        cap = ResponseCapture()
        await app(make_scope(path="/vault"), make_receive(), cap)
        assert cap.status == 403
        assert cap.body == b"Members only"

    @pytest.mark.asyncio
    async def test_lifespan(self) -> None:
        sent = []

        async def send(message):
            sent.append(message)

        await Signpost()(make_scope(scope_type="lifespan"), make_lifespan_receive(), send)
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
