"""Shared type aliases used across wren modules."""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from wren.namespaces import Namespace

# Exception hook: receives (context, qualified action name, exception)
ExceptionHook: TypeAlias = Callable[[Any, str, Exception], None]

# Prefix validator: returns (accept, namespace override or None)
PrefixValidator: TypeAlias = Callable[[tuple[str, ...]], "tuple[bool, Namespace | None]"]
