"""Namespace registry: the ordered scopes searched for controllers.

A namespace binds a name to a Python module. Registration order is search
order: the first registered namespace holding a matching controller wins.

Usage::

    registry = NamespaceRegistry()
    registry.register("controllers", myapp)         # searches myapp.controllers
    registry.register("myapp.admin.controllers")    # imported by name
    registry.register(None, myapp.views)            # root scope: the module itself

Registration is setup-time only. The dispatcher freezes the registry
before serving its first request, after which ``register()`` raises.
"""

import importlib
import logging
from collections.abc import Iterator
from types import ModuleType

from wren.actions import ControllerDef, compile_controller, is_controller_class
from wren.errors import ConfigurationError

logger = logging.getLogger("wren.namespaces")


class Namespace:
    """A named search scope bound to a module.

    Classes declared in the module are indexed by lowercased name when the
    namespace is created, and every concrete ``Controller`` subclass among
    them is compiled into a ``ControllerDef``.

    Args:
        name: Scope name. Empty or ``None`` denotes the root scope, i.e.
            *module* itself. Otherwise the submodule ``module.name`` (or
            the absolute module *name* when it already lives under
            *module*, or when no module is given).
        module: A module object or an importable dotted name.
    """

    __slots__ = ("_classes", "_controllers", "module", "name")

    def __init__(self, name: str | None = None, module: ModuleType | str | None = None) -> None:
        self.name = name or ""
        self.module = _load_module(self.name, module)
        self._classes: dict[str, type] = {}
        self._controllers: dict[str, ControllerDef] = {}
        self._index()

    @property
    def is_valid(self) -> bool:
        """True when usable as an override scope: named and loaded."""
        return bool(self.name) and self.module is not None

    def get_class(self, name: str) -> type | None:
        """Return the class declared under *name* (case-insensitive)."""
        return self._classes.get(name.lower())

    def get_controller(self, name: str) -> ControllerDef | None:
        """Return the controller declared under *name*, if it is one."""
        return self._controllers.get(name.lower())

    @property
    def controllers(self) -> list[ControllerDef]:
        return list(self._controllers.values())

    def _index(self) -> None:
        module_name = self.module.__name__
        for obj in vars(self.module).values():
            if not isinstance(obj, type) or obj.__module__ != module_name:
                continue
            key = obj.__name__.lower()
            existing = self._classes.get(key)
            if existing is not None and existing is not obj:
                msg = (
                    f"Ambiguous classes in {module_name}: {existing.__name__!r} and "
                    f"{obj.__name__!r} differ only in case."
                )
                raise ConfigurationError(msg)
            self._classes[key] = obj
            if is_controller_class(obj):
                self._controllers[key] = compile_controller(obj)

        logger.debug(
            "Namespace %r (%s): %d controller(s)",
            self.name,
            module_name,
            len(self._controllers),
        )

    def __repr__(self) -> str:
        return f"Namespace({self.name!r}, {self.module.__name__!r})"


class NamespaceRegistry:
    """Ordered, append-only list of namespaces.

    Mutable during setup only; ``freeze()`` makes it read-only so
    dispatching threads can iterate it without locks.
    """

    __slots__ = ("_frozen", "_namespaces")

    def __init__(self) -> None:
        self._namespaces: list[Namespace] = []
        self._frozen = False

    def register(
        self,
        name: str | None = None,
        module: ModuleType | str | None = None,
    ) -> Namespace:
        """Create and append a namespace. Returns the new entry."""
        return self.add(Namespace(name, module))

    def add(self, namespace: Namespace) -> Namespace:
        """Append an already-created namespace."""
        if self._frozen:
            msg = "Cannot register namespaces after dispatching has started."
            raise ConfigurationError(msg)
        self._namespaces.append(namespace)
        return namespace

    def freeze(self) -> None:
        """Make the registry read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __iter__(self) -> Iterator[Namespace]:
        return iter(self._namespaces)

    def __len__(self) -> int:
        return len(self._namespaces)


def _load_module(name: str, module: ModuleType | str | None) -> ModuleType:
    """Import the module a namespace searches."""
    if module is None:
        if not name:
            msg = "A root namespace needs a module."
            raise ConfigurationError(msg)
        return _import(name)

    base = _import(module) if isinstance(module, str) else module
    if not name:
        return base

    base_name = base.__name__
    if name == base_name or name.startswith(f"{base_name}."):
        return _import(name)
    return _import(f"{base_name}.{name}")


def _import(dotted: str) -> ModuleType:
    try:
        return importlib.import_module(dotted)
    except ImportError as exc:
        msg = f"Cannot import namespace module {dotted!r}: {exc}"
        raise ConfigurationError(msg) from exc
