"""Tests for signpost.exceptions: taxonomy and status codes."""

import pytest

from signpost.exceptions import (
    BadRequest,
    Forbidden,
    HTTPException,
    InternalServerError,
    InvalidArgument,
    MethodNotAllowed,
    NotFound,
    PatternError,
    RoutingError,
    SignpostException,
    Unauthorized,
)


class TestHTTPExceptions:
    @pytest.mark.parametrize(
        ("exc_class", "status_code"),
        [
            (BadRequest, 400),
            (Unauthorized, 401),
            (Forbidden, 403),
            (NotFound, 404),
            (MethodNotAllowed, 405),
            (InternalServerError, 500),
        ],
    )
    def test_status_codes(self, exc_class: type[HTTPException], status_code: int) -> None:
        exc = exc_class()
        assert exc.status_code == status_code
        assert exc.headers == {}
        assert isinstance(exc, SignpostException)

    def test_detail_is_message(self) -> None:
        exc = NotFound("No such page")
        assert exc.detail == "No such page"
        assert str(exc) == "No such page"


class TestRoutingErrors:
    def test_pattern_error(self) -> None:
        exc = PatternError("/a/[bc", "unterminated character class")
        assert isinstance(exc, RoutingError)
        assert "'/a/[bc'" in str(exc)
        assert "unterminated character class" in str(exc)

    def test_invalid_argument_is_type_error(self) -> None:
        assert issubclass(InvalidArgument, TypeError)
        assert issubclass(InvalidArgument, SignpostException)
