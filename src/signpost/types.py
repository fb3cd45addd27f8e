"""
Type definitions for Signpost.
"""

from collections.abc import Awaitable, Callable, Mapping, MutableMapping
from typing import Any, TypeAlias

# ASGI Types
Scope: TypeAlias = MutableMapping[str, Any]
Message: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[Message]]
Send: TypeAlias = Callable[[Message], Awaitable[None]]

# Routing Types
Handler: TypeAlias = Callable[..., Any]
RouteValue: TypeAlias = Any
RouteMap: TypeAlias = Mapping[str | int, RouteValue]
Bindings: TypeAlias = dict[str, str]

# State Types
State: TypeAlias = MutableMapping[str, Any]
