from __future__ import annotations

from typing import Any

from .directory import DirectoryNode
from .errors import (
    DirectoryLookupError,
    IntermediateCreateError,
    IntermediateLookupError,
    LeafBindError,
    NameNotFound,
    NameParseError,
)
from .names import HierarchicalName
from .observer import Observer


class NamingClient:
    """Bind and lookup over a `DirectoryNode`, creating missing subcontexts on bind.

    Holds no state between calls besides the injected observer. Concurrent
    binds under the same missing path may race on `create_subcontext`; the
    loser gets `IntermediateCreateError` and nothing is retried.
    """

    def __init__(self, observer: Observer | None = None) -> None:
        self.observer = observer or Observer()

    def lookup(self, name: str, ctx: DirectoryNode) -> Any:
        self.observer.lookup(name)
        try:
            return ctx.lookup(name)
        except Exception as e:
            raise DirectoryLookupError(f"Unable to lookup name: {e}", name=name, cause=e) from e

    def bind(self, name: str, value: Any, root: DirectoryNode) -> None:
        """Rebind `value` at `name`, creating intermediate contexts as needed.

        The direct rebind is tried first; when it fails for any reason the
        name is tokenized and walked segment by segment. Contexts created
        before a later failure are left in place.
        """
        failure = self._try_direct_bind(name, value, root)
        if failure is not None:
            self._recover_and_bind(name, value, root)
        self.observer.bound(name)

    def _try_direct_bind(self, name: str, value: Any, root: DirectoryNode) -> Exception | None:
        self.observer.binding(name)
        try:
            root.rebind(name, value)
        except Exception as e:
            return e
        return None

    def _recover_and_bind(self, name: str, value: Any, root: DirectoryNode) -> None:
        n = self._tokenize(name, root)
        ctx = root
        while len(n) > 1:
            head = n[0]
            child = self._find_intermediate(ctx, head, name)
            if child is None:
                self.observer.creating_intermediate(head)
                try:
                    child = ctx.create_subcontext(HierarchicalName((head,)))
                except Exception as e:
                    raise IntermediateCreateError(
                        f"Error creating intermediate context [{head}]: {e}", name=name, cause=e
                    ) from e
            ctx = child
            n = n.suffix(1)

        self.observer.binding(n)
        try:
            ctx.rebind(n, value)
        except Exception as e:
            raise LeafBindError(f"Error performing intermediate bind [{n}]: {e}", name=name, cause=e) from e

    def _find_intermediate(self, ctx: DirectoryNode, head: str, name: str) -> DirectoryNode | None:
        self.observer.intermediate_lookup(head)
        try:
            found = ctx.lookup(HierarchicalName((head,)))
        except NameNotFound:
            return None
        except Exception as e:
            raise IntermediateLookupError(
                f"Unanticipated error doing intermediate lookup [{head}]: {e}", name=name, cause=e
            ) from e

        if not isinstance(found, DirectoryNode):
            raise IntermediateLookupError(
                f"Intermediate name is bound to a non-context value [{head}]", name=name
            )
        self.observer.found_intermediate(head)
        return found

    @staticmethod
    def _tokenize(name: str, root: DirectoryNode) -> HierarchicalName:
        try:
            return root.parse_name(name)
        except Exception as e:
            raise NameParseError(f"Unable to tokenize name: {e}", name=name, cause=e) from e
