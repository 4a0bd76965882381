"""Structural type for parameter sources that repeat names.

A plain ``Mapping`` gives the binder one value per name. A source that
also has ``get_list`` lets array parameters collect every occurrence, as
in ``?values=1,2&values=3``. ``wren.host.QueryParams`` is one; any host
type with the same method works.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class MultiValueSource(Protocol):
    def get_list(self, key: str) -> list[str]: ...
