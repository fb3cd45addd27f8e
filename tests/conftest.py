"""
Helpers for building ASGI scope / receive / send in tests.
"""

from collections.abc import Callable, Awaitable
from typing import Any


def make_scope(
    method: str = "GET",
    path: str = "/",
    headers: dict[str, str] | None = None,
    query_string: str = "",
    scope_type: str = "http",
    extras: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a minimal ASGI scope dict."""
    raw_headers: list[tuple[bytes, bytes]] = []
    for name, value in (headers or {}).items():
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

    scope: dict[str, Any] = {
        "type": scope_type,
        "method": method,
        "path": path,
        "query_string": query_string.encode("utf-8"),
        "headers": raw_headers,
        "client": ("127.0.0.1", 12345),
        "scheme": "http",
    }
    if extras:
        scope.update(extras)
    return scope


def make_receive(body: bytes = b"") -> Callable[[], Awaitable[dict[str, Any]]]:
    """Create a simple ASGI receive callable that yields one body chunk."""
    called = False

    async def receive() -> dict[str, Any]:
        nonlocal called
        if not called:
            called = True
            return {"type": "http.request", "body": body, "more_body": False}
        return {"type": "http.disconnect"}

    return receive


def make_lifespan_receive() -> Callable[[], Awaitable[dict[str, Any]]]:
    """Create a receive callable that sends startup, then shutdown."""
    messages = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]

    async def receive() -> dict[str, Any]:
        return messages.pop(0)

    return receive


class ResponseCapture:
    """Captures ASGI send() messages for assertions."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []
        self.status: int = 0
        self.headers: dict[str, str] = {}
        self.body: bytes = b""

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)
        if message["type"] == "http.response.start":
            self.status = message.get("status", 0)
            for name, value in message.get("headers", []):
                self.headers[name.decode("latin-1").lower()] = value.decode("latin-1")
        elif message["type"] == "http.response.body":
            self.body += message.get("body", b"")
