"""Tests for signpost.output: error format negotiation and rendering."""

import json

from signpost.output import get_output_format, output_error
from signpost.request import Request
from signpost.response import HTMLResponse, JSONResponse, TextResponse


def _request(accept: str) -> Request:
    return Request.from_url("GET", "/", headers={"Accept": accept})


class TestGetOutputFormat:
    def test_no_request(self) -> None:
        assert get_output_format(None) == "text"

    def test_json(self) -> None:
        assert get_output_format(_request("application/json")) == "json"

    def test_first_known_wins(self) -> None:
        accept = "image/webp, text/html;q=0.9, application/json"
        assert get_output_format(_request(accept)) == "html"

    def test_unknown_defaults_to_text(self) -> None:
        assert get_output_format(_request("*/*")) == "text"


class TestOutputError:
    def test_text(self) -> None:
        response = output_error(404, "Not here")
        assert isinstance(response, TextResponse)
        assert response.status_code == 404
        assert response.render() == b"Not here"

    def test_html_escapes(self) -> None:
        response = output_error(400, "<script>", format="html")
        assert isinstance(response, HTMLResponse)
        assert b"&lt;script&gt;" in response.render()
        assert b"<h1>400</h1>" in response.render()

    def test_json(self) -> None:
        response = output_error(500, {"field": "bad"}, request=_request("application/json"))
        assert isinstance(response, JSONResponse)
        assert json.loads(response.render()) == {
            "error": {"field": "bad"},
            "status_code": 500,
        }
