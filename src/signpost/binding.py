"""
Argument binding: map route values onto handler parameters by name.
"""

import inspect
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from signpost.types import Handler

logger = logging.getLogger("signpost.routing")

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True, slots=True)
class Parameter:
    """A declared handler parameter."""

    name: str
    required: bool = True
    default: Any = None
    keyword_only: bool = False


def parameters_of(fn: Handler) -> tuple[Parameter, ...]:
    """
    Describe the parameters of a callable.

    ``*args`` and ``**kwargs`` are skipped; for bound methods ``self`` is
    already excluded by ``inspect``.
    """
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return ()

    params: list[Parameter] = []
    for param in sig.parameters.values():
        if param.kind in _VARIADIC:
            continue
        has_default = param.default is not inspect.Parameter.empty
        params.append(Parameter(
            name=param.name,
            required=not has_default,
            default=param.default if has_default else None,
            keyword_only=param.kind is inspect.Parameter.KEYWORD_ONLY,
        ))
    return tuple(params)


def callable_name(fn: Any) -> str:
    """Readable name of a callable for diagnostics."""
    name = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None)
    return name or type(fn).__qualname__


def bind_arguments(
    params: Sequence[Parameter],
    context: Mapping[str, Any],
    target: str = "handler",
) -> list[Any]:
    """
    Pick a value for each parameter, in declaration order.

    A same-named context value wins, else the parameter's default. A
    required parameter without a value is logged and bound to ``None``
    so the call still goes ahead.
    """
    values: list[Any] = []

    for param in params:
        if param.name in context:
            value = context[param.name]
        else:
            if param.required:
                logger.warning("Missing argument '%s' for %s()", param.name, target)
            value = param.default
        values.append(value)

    return values


def call_bound(fn: Handler, params: Sequence[Parameter], values: Sequence[Any]) -> Any:
    """Call ``fn`` passing keyword-only parameters by keyword, the rest positionally."""
    args: list[Any] = []
    kwargs: dict[str, Any] = {}

    for param, value in zip(params, values):
        if param.keyword_only:
            kwargs[param.name] = value
        else:
            args.append(value)

    return fn(*args, **kwargs)
