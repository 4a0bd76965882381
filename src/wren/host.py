"""Helpers for host adapters.

Wren does not read requests itself. A host adapter (an ASGI app, a WSGI
app, a message consumer) extracts the path segments and query parameters
and hands them to ``Dispatcher.dispatch()``. These helpers produce input
in the shape the dispatcher expects.

Usage::

    segments = split_path(scope["path"], mount="/api")
    params = QueryParams(scope["query_string"])
    if not dispatcher.dispatch(segments, params, context=scope):
        dispatcher.invoke("error", "details", context=scope)
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl


def clean_segment(segment: str | None) -> str:
    """Strip all whitespace from *segment* and lowercase it."""
    if not segment:
        return ""
    return "".join(segment.split()).lower()


def split_path(path: str, mount: str = "") -> list[str]:
    """Split a request path into cleaned segments.

    A leading *mount* prefix (the host's virtual folder) is removed first,
    so its segments never reach the dispatcher. Empty segments from
    doubled or trailing slashes are dropped.
    """
    mount = mount.strip("/")
    path = path.strip("/")
    if mount and (path == mount or path.startswith(f"{mount}/")):
        path = path[len(mount) :]
    return [cleaned for part in path.split("/") if (cleaned := clean_segment(part))]


class QueryParams(Mapping[str, str]):
    """Parsed query string, read-only.

    Indexing yields the first value sent for a name; ``get_list`` yields
    all of them in order, which is what array parameters bind from.
    Blank values are kept, so ``?units=`` reaches the binder as ``""``
    and falls back to the parameter default.

    Bytes are decoded as UTF-8, as are percent-escapes. Invalid sequences
    become U+FFFD rather than failing the request.
    """

    __slots__ = ("_values",)

    def __init__(self, query_string: bytes | str = b"") -> None:
        if isinstance(query_string, bytes):
            query_string = query_string.decode("utf-8", "replace")
        values: dict[str, list[str]] = {}
        for name, value in parse_qsl(
            query_string, keep_blank_values=True, encoding="utf-8", errors="replace"
        ):
            values.setdefault(name, []).append(value)
        self._values = {name: tuple(found) for name, found in values.items()}

    def __getitem__(self, key: str) -> str:
        return self._values[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"QueryParams({self._values!r})"

    def get_list(self, key: str) -> list[str]:
        """Return every value sent for *key*, or ``[]``."""
        return list(self._values.get(key, ()))
