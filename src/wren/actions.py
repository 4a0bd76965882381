"""Controller and action definitions: the compiled dispatch table.

Mirrors a route table: ``ActionDef`` is the frozen definition of one
action, ``ControllerDef`` holds a controller class together with its
actions keyed by lowercased name.

Definitions are compiled when a namespace is registered, so signature
problems surface at startup instead of on the first request.

Free-threading safety:
    - ActionDef and ControllerDef are frozen dataclasses
    - ``actions`` is a read-only ``MappingProxyType``
"""

import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from wren.binding import ParamSpec, param_specs
from wren.controller import Controller
from wren.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class ActionDef:
    """A frozen action definition."""

    name: str
    qualified_name: str
    func: Callable[..., Any]
    params: tuple[ParamSpec, ...]

    def __call__(self, instance: Controller, args: list[Any] | tuple[Any, ...]) -> Any:
        return self.func(instance, *args)


@dataclass(frozen=True, slots=True)
class ControllerDef:
    """A frozen controller definition.

    ``signature`` uniquely identifies the class across every registered
    module and keys the instance cache.
    """

    cls: type[Controller]
    signature: str
    actions: Mapping[str, ActionDef]

    @property
    def name(self) -> str:
        return self.cls.__name__

    def get_action(self, name: str) -> ActionDef | None:
        """Look up an action by case-insensitive name."""
        return self.actions.get(name.lower())

    def create(self) -> Controller:
        return self.cls()


def is_controller_class(obj: Any) -> bool:
    """Return True if *obj* is a concrete ``Controller`` subclass."""
    return (
        isinstance(obj, type)
        and issubclass(obj, Controller)
        and obj is not Controller
        and not inspect.isabstract(obj)
    )


def compile_controller(cls: type[Controller]) -> ControllerDef:
    """Compile *cls* into a ``ControllerDef``.

    Actions are the public plain functions declared directly in the class
    body. Inherited methods, static methods, class methods, and properties
    are not actions.

    Raises ``ConfigurationError`` for two actions whose names differ only
    in case, for ``async def`` actions, and for parameters that cannot be
    bound from query strings.
    """
    type_name = f"{cls.__module__}.{cls.__qualname__}"
    actions: dict[str, ActionDef] = {}

    for attr, value in vars(cls).items():
        if attr.startswith("_") or not inspect.isfunction(value):
            continue
        if inspect.iscoroutinefunction(value):
            msg = f"Action {type_name}.{attr} is async; actions must be plain functions."
            raise ConfigurationError(msg)

        key = attr.lower()
        if key in actions:
            msg = (
                f"Ambiguous actions on {type_name}: {actions[key].name!r} and {attr!r} "
                "differ only in case."
            )
            raise ConfigurationError(msg)

        actions[key] = ActionDef(
            name=attr,
            qualified_name=f"{type_name}.{attr}",
            func=value,
            params=param_specs(value),
        )

    return ControllerDef(
        cls=cls,
        signature=f"{cls.__module__}/{type_name}",
        actions=MappingProxyType(actions),
    )
