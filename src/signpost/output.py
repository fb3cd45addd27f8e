"""
Default error output, used when no status-code route handles an error.
"""

import html

from signpost.request import Request
from signpost.response import HTMLResponse, JSONResponse, Response, TextResponse

# Accept header media type -> output format
FORMATS: dict[str, str] = {
    "application/json": "json",
    "text/html": "html",
    "application/xhtml+xml": "html",
    "text/plain": "text",
}


def get_output_format(request: Request | None) -> str:
    """
    Pick the error format from the request's Accept header.

    The first listed media type we know wins; defaults to ``text``.
    """
    accept = request.get_header("accept", "") if request is not None else ""

    for item in (accept or "").split(","):
        media_type = item.split(";", 1)[0].strip().lower()
        if media_type in FORMATS:
            return FORMATS[media_type]

    return "text"


def output_error(
    http_code: int,
    message: str | object,
    format: str | None = None,
    request: Request | None = None,
) -> Response:
    """Build an error response in the given (or negotiated) format."""
    if format is None:
        format = get_output_format(request)

    if format == "json":
        content = message if isinstance(message, (dict, list)) else str(message)
        return JSONResponse(
            {"error": content, "status_code": http_code},
            status_code=http_code,
        )

    if format == "html":
        text = html.escape(str(message))
        return HTMLResponse(
            f"<!DOCTYPE html>\n<html><head><title>{http_code}</title></head>"
            f"<body><h1>{http_code}</h1><p>{text}</p></body></html>",
            status_code=http_code,
        )

    return TextResponse(str(message), status_code=http_code)
