"""
Route table: the registered patterns and what they route to.

Routes are resolved in registration order, so more specific patterns
must be added before more general ones.
"""

import inspect
import logging
import re
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from signpost.binding import Parameter, callable_name
from signpost.exceptions import RoutingError
from signpost.glob import Matcher, compile_pattern
from signpost.types import Bindings, Handler, RouteMap
from signpost.url import split_url

logger = logging.getLogger("signpost.routing")

# '$2' refers to the second URL part, '$2|index' falls back to 'index'
PART_REFERENCE: re.Pattern[str] = re.compile(r"\$\d+(?:\|.*)?", re.DOTALL)

_KNOWN_FIELDS: frozenset[str] = frozenset(
    {"controller", "action", "fn", "file", "args", "method", "methods", "params"}
)


@dataclass(frozen=True, slots=True)
class RouteDescriptor:
    """
    Target of a route plus its static data.

    Exactly one of ``controller``, ``fn`` or ``file`` is expected to be set.
    Descriptors are values: use :meth:`replace` to derive a modified copy.
    """

    controller: str | None = None
    action: str | None = None
    fn: Handler | None = None
    file: str | None = None
    args: Mapping[str, Any] | Sequence[Any] | None = None
    methods: frozenset[str] | None = None
    params: tuple[Parameter, ...] | None = None
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.fn is not None and inspect.iscoroutinefunction(self.fn):
            raise RoutingError(
                f"Invalid callback {callable_name(self.fn)}(): coroutine functions are not supported"
            )

    @classmethod
    def from_value(cls, value: Any) -> "RouteDescriptor":
        """Normalize a registration value; a bare callable becomes ``{fn: callable}``."""
        if isinstance(value, RouteDescriptor):
            return value
        if isinstance(value, Mapping):
            return cls.from_mapping(value)
        if callable(value):
            return cls(fn=value)
        raise RoutingError(f"Invalid route {value!r}: expected a mapping or a callable")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RouteDescriptor":
        methods = data.get("methods", data.get("method"))
        if isinstance(methods, str):
            methods = [methods]

        params = data.get("params")
        if params is not None:
            params = tuple(
                p if isinstance(p, Parameter) else Parameter(**p) for p in params
            )

        return cls(
            controller=data.get("controller"),
            action=data.get("action"),
            fn=data.get("fn"),
            file=data.get("file"),
            args=data.get("args"),
            methods=frozenset(m.upper() for m in methods) if methods else None,
            params=params,
            fields={k: v for k, v in data.items() if k not in _KNOWN_FIELDS},
        )

    @property
    def kind(self) -> str | None:
        """Which target this descriptor dispatches to."""
        if self.controller is not None:
            return "controller"
        if self.fn is not None:
            return "fn"
        if self.file is not None:
            return "file"
        return None

    def allows(self, method: str) -> bool:
        return self.methods is None or method.upper() in self.methods

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.fields)
        for name in ("controller", "action", "fn", "file", "args", "methods", "params"):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        return data

    def replace(self, **changes: Any) -> "RouteDescriptor":
        """Return a copy with the given fields overwritten."""
        return type(self).from_mapping({**self.as_dict(), **changes})

    def bind_parts(self, parts: Sequence[str]) -> "RouteDescriptor":
        """Substitute ``$N`` references with the matching URL parts."""
        args = self.args
        if isinstance(args, Mapping):
            args = {k: resolve_reference(v, parts) for k, v in args.items()}

        return RouteDescriptor(
            controller=resolve_reference(self.controller, parts),
            action=resolve_reference(self.action, parts),
            fn=self.fn,
            file=resolve_reference(self.file, parts),
            args=args,
            methods=self.methods,
            params=self.params,
            fields={k: resolve_reference(v, parts) for k, v in self.fields.items()},
        )


def resolve_reference(value: Any, parts: Sequence[str]) -> Any:
    """
    Resolve a ``$N`` URL part reference.

    Alternatives are separated by ``|`` and tried left to right; the first
    URL part that exists or the first literal wins. Other values are
    returned unchanged.
    """
    if not isinstance(value, str) or not PART_REFERENCE.fullmatch(value):
        return value

    for option in value.split("|"):
        if option.startswith("$") and option[1:].isdigit():
            index = int(option[1:])
            if 0 < index <= len(parts):
                return parts[index - 1]
            continue
        return option
    return None


class RouteTable(Mapping[str, RouteDescriptor]):
    """
    Insertion-ordered mapping of route pattern to descriptor.

    Patterns are compiled when they are added, so a malformed pattern is
    reported at registration rather than on a request.
    """

    def __init__(self, routes: RouteMap | Iterable[tuple[Any, Any]] | None = None) -> None:
        self._routes: dict[str, RouteDescriptor] = {}
        self._matchers: dict[str, Matcher] = {}
        if routes is not None:
            self.add(routes)

    def __getitem__(self, key: str) -> RouteDescriptor:
        return self._routes[str(key)]

    def __contains__(self, key: object) -> bool:
        return str(key) in self._routes

    def __iter__(self) -> Iterator[str]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __repr__(self) -> str:
        return f"RouteTable({list(self._routes)!r})"

    def add(
        self,
        routes: RouteMap | Iterable[tuple[Any, Any]],
        root: str | None = None,
    ) -> "RouteTable":
        """
        Add routes, optionally prefixing every key with ``root``.

        Existing keys are never overwritten; the duplicate is skipped with
        a warning.
        """
        items = routes.items() if isinstance(routes, Mapping) else routes

        for key, value in items:
            path = f"{root}{key}" if root else str(key)

            if path in self._routes:
                logger.warning("Route %s is already defined.", path)
                continue

            matcher = compile_pattern(path)
            self._routes[path] = RouteDescriptor.from_value(value)
            self._matchers[path] = matcher

        return self

    def matcher(self, key: str) -> Matcher:
        return self._matchers[str(key)]

    def copy(self) -> "RouteTable":
        return RouteTable(self._routes.items())

    def resolve(self, method: str | None, path: str) -> tuple[str, Bindings] | None:
        """
        Find the first route matching the path.

        Routes with a method constraint are skipped when ``method`` is given
        and not allowed. Returns ``(pattern, bindings)`` or ``None``.
        """
        parts = split_url(path)

        for key, descriptor in self._routes.items():
            if method is not None and not descriptor.allows(method):
                continue

            bindings = self._matchers[key].match_parts(parts)
            if bindings is not None:
                logger.debug("Resolved %s %s to route %s", method or "*", path, key)
                return key, bindings

        logger.debug("No route for %s %s", method or "*", path)
        return None
