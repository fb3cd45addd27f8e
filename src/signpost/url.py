"""
URL helpers: normalizing a request URL into a routable path.
"""

from urllib.parse import unquote


def normalize_url(url: str, base: str = "") -> str:
    """
    Turn a raw request URL into the path used for matching.

    Strips everything from the first ``?``, percent-decodes the rest and
    removes the ``base`` subdirectory. The result always starts with ``/``.

    Pass the raw, undecoded URL. Decoding is not idempotent: a decoded path
    that still contains ``%XX`` would be decoded a second time.
    """
    path = unquote(url.split("?", 1)[0])

    base = base.strip("/")
    if base:
        path = path.lstrip("/")
        if path == base or path.startswith(base + "/"):
            path = path[len(base):]

    return "/" + path.lstrip("/")


def split_url(path: str) -> list[str]:
    """Split a path into its non-empty segments."""
    return [part for part in path.split("/") if part]


def rebase_url(url: str, base: str = "") -> str:
    """Prefix a site-absolute URL with the webroot subdirectory."""
    base = base.rstrip("/")
    return f"{base}/{url.lstrip('/')}"
