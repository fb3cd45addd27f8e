"""
Signpost exceptions.
Following the Single Responsibility Principle - each exception handles one type of error.
"""


class SignpostException(Exception):
    """Base exception for all Signpost errors."""

    def __init__(self, message: str = "An error occurred") -> None:
        self.message = message
        super().__init__(self.message)


class RoutingError(SignpostException):
    """Routing-related errors."""
    pass


class PatternError(RoutingError):
    """A route pattern could not be compiled."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid route pattern '{pattern}': {reason}")


class InvalidArgument(SignpostException, TypeError):
    """An argument of the wrong kind was passed, eg. a non-callable continuation."""
    pass


class HTTPException(SignpostException):
    """HTTP-related exceptions with status codes."""

    def __init__(
        self,
        status_code: int = 500,
        detail: str = "Internal Server Error",
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.headers = headers or {}
        super().__init__(detail)


class BadRequest(HTTPException):
    """400 Bad Request."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(400, detail)


class Unauthorized(HTTPException):
    """401 Unauthorized."""

    def __init__(
        self,
        detail: str = "Unauthorized",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(401, detail, headers)


class Forbidden(HTTPException):
    """403 Forbidden."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(403, detail)


class NotFound(HTTPException):
    """404 Not Found."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(404, detail)


class MethodNotAllowed(HTTPException):
    """405 Method Not Allowed."""

    def __init__(self, detail: str = "Method Not Allowed") -> None:
        super().__init__(405, detail)


class InternalServerError(HTTPException):
    """500 Internal Server Error."""

    def __init__(self, detail: str = "Internal Server Error") -> None:
        super().__init__(500, detail)
