"""Wren exception hierarchy.

Shared across the registry, resolver, binder, and dispatcher so every
module raises and catches the same types.

Runtime dispatch never raises these. A request that cannot be matched
collapses to ``False``; only setup-time mistakes surface as exceptions.
"""

from enum import Enum


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when dispatcher configuration is invalid.

    Typically raised while registering namespaces, so problems surface
    at startup rather than on the first request.
    """


class DispatchMiss(Enum):
    """Why a dispatch reported no match. Used for debug logging."""

    MALFORMED_PATH = "malformed path"
    PREFIX_REJECTED = "prefix rejected"
    CONTROLLER_NOT_FOUND = "controller not found"
    ACTION_NOT_FOUND = "action not found"
    BINDING_FAILED = "parameter binding failed"
