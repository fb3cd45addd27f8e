"""Tests for signpost.request: scope access and path rewriting."""

from signpost.request import Request

from tests.conftest import make_scope


class TestRequest:
    def test_basic_properties(self) -> None:
        req = Request(make_scope(method="POST", path="/items", query_string="a=1"))
        assert req.method == "POST"
        assert req.path == "/items"
        assert req.query_string == "a=1"
        assert req.target == "/items?a=1"

    def test_query_params_multi(self) -> None:
        req = Request(make_scope(query_string="tag=a&tag=b&x=1"))
        assert req.query_params["tag"] == ["a", "b"]
        assert req.get_query("tag") == "a"
        assert req.get_query("x") == "1"

    def test_headers_lowercased(self) -> None:
        req = Request(make_scope(headers={"Accept": "text/html"}))
        assert req.get_header("ACCEPT") == "text/html"

    def test_target_prefers_raw_path(self) -> None:
        scope = make_scope(path="/a b", extras={"raw_path": b"/a%20b"})
        assert Request(scope).target == "/a%20b"

    def test_target_quotes_decoded_path(self) -> None:
        assert Request(make_scope(path="/a b")).target == "/a%20b"


class TestFromUrl:
    def test_from_url(self) -> None:
        req = Request.from_url("get", "https://example.com/users/42?x=1")
        assert req.method == "GET"
        assert req.scheme == "https"
        assert req.host == "example.com"
        assert req.path == "/users/42"
        assert req.url == "https://example.com/users/42?x=1"

    def test_decodes_path(self) -> None:
        req = Request.from_url("GET", "/caf%C3%A9")
        assert req.path == "/café"
        assert req.target == "/caf%C3%A9"


class TestWithPath:
    def test_keeps_scheme_host_and_query(self) -> None:
        req = Request.from_url("GET", "https://example.com/missing?lang=en")
        error_req = req.with_path("/404")

        assert error_req is not req
        assert error_req.path == "/404"
        assert error_req.url == "https://example.com/404?lang=en"
        assert req.path == "/missing"

    def test_shares_state(self) -> None:
        req = Request.from_url("GET", "/a")
        req.state["request_id"] = "abc"
        assert req.with_path("/b").state["request_id"] == "abc"
