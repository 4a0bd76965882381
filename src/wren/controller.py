"""Controller base class: the handler-group capability.

Any class the dispatcher can resolve must subclass ``Controller``. The
dispatcher hands each instance the current request context and the prefix
segments before invoking an action. Both are read-only from the
controller's point of view.

Usage::

    from wren import Controller

    class ListController(Controller):
        def sum(self, values: list[int]) -> None:
            self.context.write(" + ".join(map(str, values)))

Prefix segments are the request segments preceding the controller/action
pair. For ``/one/two/list/sum`` the prefix is ``("one", "two")``. They are
not used by wren itself; a controller may map them to anything, and a
prefix validator may use them to pick the namespace to search.
"""

from typing import Any


class Controller:
    """Base class for every controller.

    Controllers are constructed without arguments. With instance reuse
    enabled one instance serves every request for its class, possibly from
    several threads at once, so actions should keep no per-request state on
    ``self``.
    """

    _context: Any = None
    _prefix: tuple[str, ...] = ()
    _segments: tuple[str, str] = ("", "")

    @property
    def context(self) -> Any:
        """The host-supplied context of the current request."""
        return self._context

    @property
    def prefix(self) -> tuple[str, ...]:
        """Lowercased prefix segments of the current request."""
        return self._prefix

    @property
    def query_path(self) -> str:
        """All segments of the current request, joined with ``/``.

        The host mount prefix is never part of it, and the result is
        lowercase.
        """
        return "/".join(part for part in (*self._prefix, *self._segments) if part)

    def _attach(self, context: Any, prefix: tuple[str, ...], segments: tuple[str, str]) -> None:
        """Set request state. Called by the dispatcher only."""
        self._context = context
        self._prefix = prefix
        self._segments = segments
