"""
Error handling middleware.
"""

import logging
import uuid
from typing import TYPE_CHECKING

from signpost.exceptions import HTTPException
from signpost.middleware.base import Middleware, Next
from signpost.output import output_error
from signpost.request import Request
from signpost.response import Response

if TYPE_CHECKING:
    from signpost.routing import Router


class ErrorHandlerMiddleware(Middleware):
    """
    Global error handling middleware.
    Catches exceptions and returns appropriate error responses.

    Always logs the full exception server-side. Internal details reach the
    client only in debug mode. Attaches a unique request ID to every
    response for traceability.
    """

    def __init__(self, router: "Router", debug: bool = False) -> None:
        super().__init__(router)
        self.debug = debug
        self._logger = logging.getLogger("signpost.errors")

    def process(self, request: Request, response: Response, call_next: Next) -> Response:
        request_id = str(uuid.uuid4())
        request.state["request_id"] = request_id

        try:
            result = call_next(request, response)
        except HTTPException as exc:
            # Log client errors at warning, server errors at error
            if exc.status_code >= 500:
                self._logger.error(
                    "request_id=%s status=%d detail=%s",
                    request_id, exc.status_code, exc.detail,
                    exc_info=True,
                )
            else:
                self._logger.warning(
                    "request_id=%s status=%d detail=%s",
                    request_id, exc.status_code, exc.detail,
                )
            result = output_error(exc.status_code, exc.detail, request=request)
            for name, value in exc.headers.items():
                result.set_header(name, value)
        except Exception as exc:
            # Always log full traceback server-side
            self._logger.exception(
                "Unhandled exception request_id=%s: %s",
                request_id, exc,
            )
            message = f"{type(exc).__name__}: {exc}" if self.debug else "Internal Server Error"
            result = output_error(500, message, request=request)

        result.set_header("x-request-id", request_id)
        return result
