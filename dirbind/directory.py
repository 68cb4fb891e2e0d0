from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .names import HierarchicalName, NameLike


@runtime_checkable
class DirectoryNode(Protocol):
    """A context in the naming tree.

    Names passed to these operations are relative to the node. Providers
    signal a missing binding with `NameNotFound` and every other failure
    with another `NamingFault` subclass.
    """

    def lookup(self, name: NameLike) -> Any:
        ...

    def rebind(self, name: NameLike, value: Any) -> None:
        ...

    def create_subcontext(self, name: NameLike) -> "DirectoryNode":
        ...

    def parse_name(self, text: str) -> HierarchicalName:
        ...
