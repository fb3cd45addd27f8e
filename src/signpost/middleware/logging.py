"""
Request logging middleware.
"""

import logging
import time
from typing import TYPE_CHECKING, Any

from signpost.middleware.base import Middleware, Next
from signpost.request import Request
from signpost.response import Response

if TYPE_CHECKING:
    from signpost.routing import Router


class RequestLoggingMiddleware(Middleware):
    """
    Request logging middleware.
    Logs incoming requests, the matched route and the response status
    code using Python's standard logging module.
    """

    def __init__(
        self,
        router: "Router",
        logger: Any = None,
        log_level: int | None = None,
    ) -> None:
        super().__init__(router)
        self._logger = logger or logging.getLogger("signpost.access")
        self._log_level = log_level or logging.INFO

    def process(self, request: Request, response: Response, call_next: Next) -> Response:
        start_time = time.perf_counter()
        status_code = 0

        try:
            response = call_next(request, response)
            status_code = response.status_code
            return response
        finally:
            duration = (time.perf_counter() - start_time) * 1000
            route = self.router.get("route") if self.router.is_used() else None
            self._logger.log(
                self._log_level,
                "%s %s %d %.2fms route=%s request_id=%s client=%s",
                request.method,
                request.path,
                status_code,
                duration,
                route or "-",
                request.state.get("request_id", "-"),
                request.client[0] if request.client else "-",
            )
