"""
Error page middleware.
"""

from signpost.middleware.base import Middleware, Next
from signpost.request import Request
from signpost.response import Response


class ErrorPageMiddleware(Middleware):
    """
    Route error responses to their status-code route.

    When the response already carries an error status (400 and up), the
    request path is replaced by ``/<status>`` and the router runs again,
    so a ``"404"`` route renders the page. The rest of the chain is not
    called in that case.
    """

    def process(self, request: Request, response: Response, call_next: Next) -> Response:
        if response.status_code >= 400:
            error_request = request.with_path(f"/{response.status_code}")
            return self.router.run(error_request, response)

        return call_next(request, response)
