"""
Signpost - sample site

Demonstrates glob routes, controllers, callbacks, static files and error pages.
Run with: uv run uvicorn sample:app --reload
"""


import logging

from signpost import ControllerRegistry, Router, Signpost, TextResponse
from signpost.exceptions import NotFound
from signpost.middleware import ErrorPageMiddleware, RequestLoggingMiddleware
from signpost.request import Request

# =============================================================================
# Application Setup
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S%z",
)
logger = logging.getLogger("signpost.sample")

controllers = ControllerRegistry()

USERS = {
    "1": {"id": 1, "name": "Alice"},
    "2": {"id": 2, "name": "Bob"},
}


# =============================================================================
# Controllers
# =============================================================================


@controllers.register
class DefaultController:
    """Handles the home page."""

    def __init__(self, router: Router) -> None:
        self.router = router

    def Action(self) -> TextResponse:
        return TextResponse("Welcome to Signpost")


@controllers.register
class UserController:
    """User pages; ``/users/#:id`` binds ``id`` by name."""

    def __init__(self, router: Router) -> None:
        self.router = router

    def listAction(self) -> list[dict]:
        return list(USERS.values())

    def showAction(self, id: str) -> dict:
        if id not in USERS:
            raise NotFound(f"User {id} not found")
        return USERS[id]

    def showPostsAction(self, id: str, year: str = "all") -> dict:
        return {"user": id, "year": year, "posts": []}


# =============================================================================
# Callbacks
# =============================================================================


def docs(page: str, request: Request) -> str:
    return f"Docs for {page} (lang={request.get_query('lang', 'en')})"


def old_blog(router: Router):
    return router.redirect("/docs/blog", 301)


def not_found_page(message: str | None = None) -> TextResponse:
    return TextResponse(message or "Nothing to see here", status_code=404)


# =============================================================================
# Routes
# =============================================================================

routes = {
    "/": {"controller": "default"},
    "/users": {"controller": "user", "action": "list", "method": "GET"},
    "/users/#:id": {"controller": "user", "action": "show"},
    "/users/#:id/posts/#:year": {"controller": "user", "action": "show-posts"},
    "/docs/*:page": docs,
    "/blog/**": old_blog,
    "/assets/*": {"file": "assets/$2"},
    "404": not_found_page,
}

app = Signpost(routes, controllers=controllers, document_root="public", debug=True)

# Order matters: first added is outermost
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(ErrorPageMiddleware)


@app.route("/health", methods=["GET"])
def health() -> dict:
    return {"status": "ok"}


if __name__ == "__main__":
    logger.info("Starting Signpost sample on http://localhost:8000")
    app.run(host="localhost", port=8000)
