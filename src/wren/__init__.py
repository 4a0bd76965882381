"""Wren: name-based controller/action dispatch for any host.

Maps path segments such as ``/list/sum`` and query parameters such as
``values=1,2,3`` to a typed method call on a controller class, with
optional instance reuse and idle eviction. Transport stays with the host.

Basic usage::

    from wren import Controller, Dispatcher

    class ListController(Controller):
        def sum(self, values: list[int]) -> None:
            self.context.write(str(sum(values)))

    dispatcher = Dispatcher()
    dispatcher.register(None, __name__)

    dispatcher.dispatch(["list", "sum"], {"values": "1,2,3"}, context=response)
"""

__version__ = "0.1.0-dev"
__all__ = [
    "ConfigurationError",
    "Controller",
    "Dispatcher",
    "DispatcherConfig",
    "Namespace",
    "QueryParams",
    "WrenError",
    "split_path",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "Dispatcher":
        from wren.dispatcher import Dispatcher

        return Dispatcher

    if name == "DispatcherConfig":
        from wren.config import DispatcherConfig

        return DispatcherConfig

    if name == "Controller":
        from wren.controller import Controller

        return Controller

    if name == "Namespace":
        from wren.namespaces import Namespace

        return Namespace

    if name in ("QueryParams", "split_path"):
        from wren import host as _host

        return getattr(_host, name)

    if name in ("ConfigurationError", "WrenError"):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
