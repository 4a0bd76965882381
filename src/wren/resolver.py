"""Controller and action resolution.

Finds a controller by name across the registered namespaces, then an
action on it. Both lookups are case-insensitive.

Resolution order:
1. An override namespace, when valid, is the only scope searched.
2. Otherwise namespaces are searched in registration order.
3. Within a scope the exact name is tried before ``name + suffix``, so
   ``/list/sum`` finds ``List`` before ``ListController``.

A class found under the requested name that is not a concrete
``Controller`` is a conflicting declaration: the scope yields nothing and
the search moves on.
"""

import logging
from collections.abc import Iterable

from wren.actions import ActionDef, ControllerDef
from wren.namespaces import Namespace

logger = logging.getLogger("wren.dispatch")


def resolve_type(
    name: str,
    namespaces: Iterable[Namespace],
    override: Namespace | None = None,
    *,
    suffix: str = "Controller",
) -> ControllerDef | None:
    """Find the controller called *name*.

    Returns ``None`` if no scope declares a matching controller.
    """
    if override is not None and override.is_valid:
        return _find_in(override, name, suffix)

    for namespace in namespaces:
        found = _find_in(namespace, name, suffix)
        if found is not None:
            return found
    return None


def resolve_action(controller: ControllerDef, name: str) -> ActionDef | None:
    """Find the action called *name* on *controller*."""
    return controller.get_action(name)


def _find_in(namespace: Namespace, name: str, suffix: str) -> ControllerDef | None:
    key = name
    if namespace.get_class(key) is None and suffix:
        key = name + suffix

    cls = namespace.get_class(key)
    if cls is None:
        return None

    found = namespace.get_controller(key)
    if found is None:
        logger.debug(
            "Ignoring %s.%s: not a concrete Controller subclass",
            namespace.module.__name__,
            cls.__name__,
        )
    return found
