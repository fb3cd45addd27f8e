"""
Controller registry.

Controllers are looked up by class name in an explicit registry instead of
by importing arbitrary symbols. A route ``{"controller": "user-profile",
"action": "edit"}`` dispatches to ``UserProfileController.editAction``.
"""

import re
from collections.abc import Iterator
from typing import Any

_WORD_BOUNDARY: re.Pattern[str] = re.compile(r"[\s_\-.]+")


def studly_case(value: str) -> str:
    """'user-profile' -> 'UserProfile'"""
    return "".join(word[:1].upper() + word[1:] for word in _WORD_BOUNDARY.split(value) if word)


def camel_case(value: str) -> str:
    """'show-all' -> 'showAll'"""
    studly = studly_case(value)
    return studly[:1].lower() + studly[1:]


def controller_class_name(controller: str) -> str:
    return studly_case(controller) + "Controller"


def action_method_name(action: str | None) -> str:
    return camel_case(action or "") + "Action"


class ControllerRegistry:
    """
    Mapping of controller class name to class.

    Usage:
        controllers = ControllerRegistry()

        @controllers.register
        class UserController:
            def __init__(self, router): ...
            def showAction(self, id): ...
    """

    def __init__(self, *classes: type) -> None:
        self._classes: dict[str, type] = {}
        for cls in classes:
            self.register(cls)

    def register(self, cls: type, name: str | None = None) -> type:
        """Register a controller class. Usable as a class decorator."""
        self._classes[name or cls.__name__] = cls
        return cls

    def get(self, name: str) -> type | None:
        return self._classes.get(name)

    def lookup(self, controller: str) -> type | None:
        """Find the class for a route's ``controller`` field."""
        return self.get(controller_class_name(controller))

    def __contains__(self, name: Any) -> bool:
        return name in self._classes

    def __iter__(self) -> Iterator[str]:
        return iter(self._classes)

    def __len__(self) -> int:
        return len(self._classes)
