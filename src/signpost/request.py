"""
Request handling for Signpost.
Encapsulates the HTTP request data the router needs.
"""

from collections.abc import Mapping
from functools import cached_property
from typing import Any
from urllib.parse import parse_qs, quote, unquote, urlsplit

from signpost.types import Scope, State


class Request:
    """
    HTTP Request wrapper over an ASGI scope.

    Requests are treated as values: :meth:`with_path` returns a new
    request instead of changing this one.
    """

    def __init__(self, scope: Scope) -> None:
        self._scope = scope
        self.state: State = scope.setdefault("state", {})

    @classmethod
    def from_url(
        cls,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
    ) -> "Request":
        """Build a request from a method and a URL, eg. ``GET /users/42?x=1``."""
        parts = urlsplit(url)
        raw_headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ]
        if parts.netloc and not any(name == b"host" for name, _ in raw_headers):
            raw_headers.append((b"host", parts.netloc.encode("latin-1")))

        return cls({
            "type": "http",
            "method": method.upper(),
            "path": unquote(parts.path) or "/",
            "raw_path": (parts.path or "/").encode("utf-8"),
            "query_string": parts.query.encode("utf-8"),
            "headers": raw_headers,
            "scheme": parts.scheme or "http",
        })

    @property
    def scope(self) -> Scope:
        return self._scope

    @property
    def method(self) -> str:
        """HTTP method (GET, POST, etc.)."""
        return self._scope.get("method", "GET")

    @property
    def path(self) -> str:
        """Request path."""
        return self._scope.get("path", "/")

    @property
    def query_string(self) -> str:
        """Raw query string."""
        return self._scope.get("query_string", b"").decode("utf-8")

    @cached_property
    def query_params(self) -> Mapping[str, str | list[str]]:
        """Parsed query parameters."""
        params: dict[str, str | list[str]] = {}
        parsed = parse_qs(self.query_string, keep_blank_values=True)

        for key, values in parsed.items():
            if len(values) == 1:
                params[key] = values[0]
            else:
                params[key] = values

        return params

    @cached_property
    def headers(self) -> Mapping[str, str]:
        """Request headers as a dictionary."""
        headers: dict[str, str] = {}
        raw_headers = self._scope.get("headers", [])

        for name, value in raw_headers:
            header_name = name.decode("latin-1").lower()
            header_value = value.decode("latin-1")
            headers[header_name] = header_value

        return headers

    @property
    def host(self) -> str:
        """Host header value."""
        return self.headers.get("host", "")

    @property
    def scheme(self) -> str:
        """URL scheme (http or https)."""
        return self._scope.get("scheme", "http")

    @property
    def client(self) -> tuple[str, int] | None:
        """Client address as (host, port) tuple."""
        client = self._scope.get("client")
        if client:
            return (client[0], client[1])
        return None

    @property
    def target(self) -> str:
        """Undecoded path plus query string, as sent in the request line."""
        raw_path = self._scope.get("raw_path")
        path = raw_path.decode("utf-8") if raw_path else quote(self.path)
        if self.query_string:
            return f"{path}?{self.query_string}"
        return path

    @property
    def url(self) -> str:
        """Full URL."""
        return f"{self.scheme}://{self.host}{self.target}"

    def with_path(self, path: str) -> "Request":
        """Copy of this request for another path; scheme, host and query are kept."""
        scope: dict[str, Any] = dict(self._scope)
        scope["path"] = unquote(path)
        scope["raw_path"] = path.encode("utf-8")
        return type(self)(scope)

    def get_header(self, name: str, default: str | None = None) -> str | None:
        """Get a specific header value."""
        return self.headers.get(name.lower(), default)

    def get_query(self, name: str, default: str | None = None) -> str | None:
        """Get a specific query parameter."""
        value = self.query_params.get(name, default)
        if isinstance(value, list):
            return value[0] if value else default
        return value
