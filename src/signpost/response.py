"""
Response handling for Signpost.
Implements various response types following Open/Closed Principle.
"""

import html
import json
import mimetypes
import os
from abc import ABC, abstractmethod
from typing import Any

from signpost.types import Send


class Response(ABC):
    """
    Abstract base response class.

    Responses are built synchronously by handlers and sent through ASGI
    by awaiting the instance with ``send``.
    """

    media_type: str = "text/plain"
    charset: str = "utf-8"

    def __init__(
        self,
        content: Any = None,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self._headers: dict[str, str] = headers or {}
        self._content = content
        self._body: bytes | None = None

    @property
    def content(self) -> Any:
        return self._content

    @property
    def headers(self) -> dict[str, str]:
        return self._headers

    @property
    def content_type(self) -> str:
        """Full content type with charset."""
        if self.media_type.startswith("text/") or "json" in self.media_type:
            return f"{self.media_type}; charset={self.charset}"
        return self.media_type

    @abstractmethod
    def render(self) -> bytes:
        """Render the response body. Must be implemented by subclasses."""
        ...

    def prepare(self) -> "Response":
        """Render the body now, so rendering errors surface while routing."""
        if self._body is None:
            self._body = self.render()
        return self

    def set_header(self, name: str, value: str) -> "Response":
        """Set a response header. Returns self for chaining."""
        self._headers[name] = value
        return self

    def _build_headers(self) -> list[tuple[bytes, bytes]]:
        """Build header list for ASGI response."""
        headers: list[tuple[bytes, bytes]] = []

        headers.append((b"content-type", self.content_type.encode("latin-1")))

        for name, value in self._headers.items():
            headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

        return headers

    async def __call__(self, send: Send) -> None:
        """Send the response via ASGI."""
        body = self._body if self._body is not None else self.render()

        await send({
            "type": "http.response.start",
            "status": self.status_code,
            "headers": self._build_headers(),
        })

        await send({
            "type": "http.response.body",
            "body": body,
        })


class TextResponse(Response):
    """Plain text response."""

    media_type = "text/plain"

    def render(self) -> bytes:
        if self._content is None:
            return b""
        if isinstance(self._content, bytes):
            return self._content
        return str(self._content).encode(self.charset)


class HTMLResponse(TextResponse):
    """HTML response."""

    media_type = "text/html"


class JSONResponse(Response):
    """JSON response with automatic serialization."""

    media_type = "application/json"

    def __init__(
        self,
        content: Any = None,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
        indent: int | None = None,
    ) -> None:
        super().__init__(content, status_code, headers)
        self._indent = indent

    def render(self) -> bytes:
        if self._content is None:
            return b"null"
        return json.dumps(
            self._content,
            ensure_ascii=False,
            allow_nan=False,
            indent=self._indent,
            separators=(",", ":") if self._indent is None else None,
        ).encode(self.charset)


class RedirectResponse(HTMLResponse):
    """HTTP redirect response with a short HTML body for clients that don't follow it."""

    def __init__(
        self,
        url: str,
        status_code: int = 303,
        headers: dict[str, str] | None = None,
    ) -> None:
        escaped = html.escape(url)
        content = f'You are being redirected to <a href="{escaped}">{escaped}</a>'
        super().__init__(content, status_code, headers)
        self._headers["location"] = url


class FileResponse(Response):
    """
    Response for serving files.

    Streams file contents in chunks to avoid loading entire files
    into memory. Validates the resolved path against a base directory
    to prevent directory traversal attacks.
    """

    # Default chunk size: 64 KB
    CHUNK_SIZE: int = 65_536

    def __init__(
        self,
        path: str,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
        media_type: str | None = None,
        base_directory: str | None = None,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        super().__init__(None, status_code, headers)

        if base_directory is not None:
            path = os.path.join(base_directory, path.lstrip("/"))

        # Resolve to an absolute, symlink-free path
        resolved = os.path.realpath(path)

        # Directory traversal protection
        if base_directory is not None:
            resolved_base = os.path.realpath(base_directory)
            if not resolved.startswith(resolved_base + os.sep) and resolved != resolved_base:
                raise ValueError(
                    f"Path '{path}' resolves outside the allowed base directory"
                )

        if not os.path.isfile(resolved):
            raise FileNotFoundError(f"File not found: {path}")

        self._path = resolved
        self._chunk_size = chunk_size
        self.media_type = (
            media_type
            or mimetypes.guess_type(resolved)[0]
            or "application/octet-stream"
        )

        stat = os.stat(resolved)
        self._headers["content-length"] = str(stat.st_size)

    @property
    def path(self) -> str:
        return self._path

    def prepare(self) -> "FileResponse":
        # Streamed when sent; the file was checked on construction
        return self

    def render(self) -> bytes:
        with open(self._path, "rb") as f:
            return f.read()

    async def __call__(self, send: Send) -> None:
        """Stream the file via ASGI in chunks."""
        await send({
            "type": "http.response.start",
            "status": self.status_code,
            "headers": self._build_headers(),
        })

        with open(self._path, "rb") as f:
            while True:
                chunk = f.read(self._chunk_size)
                if not chunk:
                    break
                await send({
                    "type": "http.response.body",
                    "body": chunk,
                    "more_body": True,
                })

        await send({
            "type": "http.response.body",
            "body": b"",
            "more_body": False,
        })
