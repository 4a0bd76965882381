"""Dispatcher: maps path segments to a controller action and invokes it.

The last two segments name the controller and the action; anything before
them is the prefix. Each dispatch runs through these stages, stopping at
the first one that fails:

1. Segment interpretation (at least two segments)
2. Prefix validation (may veto, or pick the namespace to search)
3. Controller resolution
4. Action resolution
5. Parameter binding
6. Instance acquisition (cached or new)
7. Invocation inside a fault boundary
8. Cache update

Stages 1-5 failing make ``dispatch()`` return ``False``; the host applies
its own fallback, typically invoking an error controller. Once stage 7 is
reached the result is ``True`` whether or not the action raised. Action
exceptions go to ``on_action_exception`` when set and are logged
otherwise; they never propagate to the host.

Usage::

    dispatcher = Dispatcher(DispatcherConfig(timeout=600))
    dispatcher.register("controllers", myapp)
    dispatcher.on_action_exception = report

    if not dispatcher.dispatch(segments, params, context=ctx):
        dispatcher.invoke("error", "details", context=ctx)

Free-threading safety:
    - The namespace registry is frozen on the first dispatch
    - The instance cache guards itself; handlers run outside its lock
    - Separator and timeout are read and written under ``_lock``
"""

import functools
import logging
import threading
import time
from collections.abc import Callable, Mapping, Sequence
from types import ModuleType
from typing import Any

from anyio import to_thread

from wren._internal.types import ExceptionHook, PrefixValidator
from wren.binding import bind
from wren.cache import InstanceCache, Sweeper
from wren.config import DispatcherConfig, validate_separator, validate_timeout
from wren.errors import DispatchMiss
from wren.host import clean_segment
from wren.namespaces import Namespace, NamespaceRegistry
from wren.resolver import resolve_action, resolve_type

logger = logging.getLogger("wren.dispatch")

_NO_PARAMS: Mapping[str, Any] = {}


class Dispatcher:
    """Name-based controller/action dispatcher.

    One dispatcher is meant to be shared by every request thread. Register
    namespaces first; the registry becomes read-only on the first
    dispatch.

    Subclasses may override ``validate_prefix()`` instead of passing a
    *validate_prefix* callable.
    """

    def __init__(
        self,
        config: DispatcherConfig | None = None,
        *,
        on_action_exception: ExceptionHook | None = None,
        validate_prefix: PrefixValidator | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or DispatcherConfig()
        self.on_action_exception = on_action_exception
        self._prefix_validator = validate_prefix
        self._namespaces = NamespaceRegistry()
        self._lock = threading.Lock()
        self._separator = self.config.separator
        self._timeout: float = 0
        self._cache = InstanceCache(reuse=self.config.reuse_controllers, clock=clock)
        self._sweeper = Sweeper(self._cache)
        if self.config.timeout:
            self.set_timeout(self.config.timeout)

    # -- Configuration --

    def register(self, name: str | None = None, module: ModuleType | str | None = None) -> Namespace:
        """Add a namespace to search for controllers.

        Namespaces are searched in the order they are registered. An empty
        or ``None`` name searches *module* itself.
        """
        return self._namespaces.register(name, module)

    @property
    def namespaces(self) -> NamespaceRegistry:
        return self._namespaces

    @property
    def cache(self) -> InstanceCache:
        return self._cache

    @property
    def separator(self) -> str:
        """Separator for splitting array parameter values."""
        with self._lock:
            return self._separator

    @separator.setter
    def separator(self, value: str) -> None:
        validate_separator(value)
        with self._lock:
            self._separator = value

    @property
    def reuse_controllers(self) -> bool:
        """Whether controller instances are cached between requests."""
        return self._cache.reuse

    @reuse_controllers.setter
    def reuse_controllers(self, value: bool) -> None:
        self._cache.reuse = value

    @property
    def timeout(self) -> float:
        """Idle lifetime of cached controllers in seconds (0 = never evict)."""
        with self._lock:
            return self._timeout

    def set_timeout(self, lifetime: float) -> None:
        """Release controllers unused for *lifetime* seconds.

        The check runs every ``lifetime / 10`` seconds. Passing 0 switches
        eviction off.
        """
        validate_timeout(lifetime)
        with self._lock:
            self._timeout = lifetime
            self._sweeper.schedule(lifetime)

    def reset(self) -> None:
        """Drop every cached controller instance."""
        self._cache.reset()

    def close(self) -> None:
        """Stop the eviction task."""
        self._sweeper.stop()

    def __enter__(self) -> "Dispatcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- Hooks --

    def validate_prefix(self, prefix: tuple[str, ...]) -> tuple[bool, Namespace | None]:
        """Validate the prefix segments of a request.

        Return ``(False, None)`` to reject the request. Return a namespace
        as the second item to search only that namespace for the
        controller. Accepts everything by default.
        """
        if self._prefix_validator is None:
            return True, None
        return self._prefix_validator(prefix)

    # -- Dispatch --

    def dispatch(
        self,
        segments: Sequence[str],
        params: Mapping[str, Any] | None = None,
        context: Any = None,
    ) -> bool:
        """Map *segments* to ``controller/action`` and invoke it.

        Returns True if an action was located and invoked.
        """
        cleaned = [clean_segment(s) for s in segments]
        if len(cleaned) < 2:
            return self._miss(DispatchMiss.MALFORMED_PATH, "/".join(cleaned))

        *prefix, controller, action = cleaned
        return self._dispatch(controller, action, None, tuple(prefix), params, context)

    def invoke(
        self,
        controller: str,
        action: str,
        arguments: Sequence[Any] | None = None,
        prefix: Sequence[str] | None = None,
        *,
        params: Mapping[str, Any] | None = None,
        context: Any = None,
    ) -> bool:
        """Invoke an action by explicit controller and action names.

        *arguments*, when given, are passed to the action as-is instead of
        being bound from *params*.
        """
        ctrl = clean_segment(controller)
        act = clean_segment(action)
        if not ctrl or not act:
            return self._miss(DispatchMiss.MALFORMED_PATH, f"{controller!r}/{action!r}")
        return self._dispatch(ctrl, act, arguments, tuple(prefix or ()), params, context)

    async def dispatch_async(
        self,
        segments: Sequence[str],
        params: Mapping[str, Any] | None = None,
        context: Any = None,
    ) -> bool:
        """``dispatch()`` in a worker thread, for async hosts."""
        call = functools.partial(self.dispatch, segments, params, context)
        return await to_thread.run_sync(call)

    async def invoke_async(
        self,
        controller: str,
        action: str,
        arguments: Sequence[Any] | None = None,
        prefix: Sequence[str] | None = None,
        *,
        params: Mapping[str, Any] | None = None,
        context: Any = None,
    ) -> bool:
        """``invoke()`` in a worker thread, for async hosts."""
        call = functools.partial(
            self.invoke, controller, action, arguments, prefix, params=params, context=context
        )
        return await to_thread.run_sync(call)

    def _dispatch(
        self,
        controller: str,
        action: str,
        arguments: Sequence[Any] | None,
        prefix: tuple[str, ...],
        params: Mapping[str, Any] | None,
        context: Any,
    ) -> bool:
        self._namespaces.freeze()
        path = "/".join((*prefix, controller, action))

        accepted, override = self.validate_prefix(prefix)
        if not accepted:
            return self._miss(DispatchMiss.PREFIX_REJECTED, path)

        controller_def = resolve_type(
            controller,
            self._namespaces,
            override,
            suffix=self.config.controller_suffix,
        )
        if controller_def is None:
            return self._miss(DispatchMiss.CONTROLLER_NOT_FOUND, path)

        action_def = resolve_action(controller_def, action)
        if action_def is None:
            return self._miss(DispatchMiss.ACTION_NOT_FOUND, path)

        if arguments is None:
            bound, args = bind(
                action_def.params,
                params if params is not None else _NO_PARAMS,
                separator=self.separator,
                ignore_case=self.config.ignore_param_case,
            )
            if not bound:
                return self._miss(DispatchMiss.BINDING_FAILED, path)
        else:
            args = list(arguments)

        signature = controller_def.signature
        instance = self._cache.get(signature)
        if instance is None:
            instance = controller_def.create()
        instance._attach(context, prefix, (controller, action))

        try:
            action_def(instance, args)
        except Exception as exc:
            hook = self.on_action_exception
            if hook is None:
                logger.exception("Action %s raised", action_def.qualified_name)
            else:
                self._report(hook, context, action_def.qualified_name, exc)

        self._cache.add(signature, instance)
        self._cache.touch(signature)
        return True

    def _report(self, hook: ExceptionHook, context: Any, name: str, exc: Exception) -> None:
        try:
            hook(context, name, exc)
        except Exception:
            logger.exception("Exception hook failed while reporting %s", name)

    def _miss(self, reason: DispatchMiss, path: str) -> bool:
        logger.debug("No match for %r: %s", path, reason.value)
        return False
