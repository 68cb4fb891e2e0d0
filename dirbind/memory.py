"""In-memory directory provider.

A strict tree of dict-backed contexts: nothing is created implicitly, so a
rebind under a missing parent fails with `NameNotFound` exactly like a
remote naming service would.
"""

from __future__ import annotations

import threading
from typing import Any

from .errors import NameAlreadyBound, NameNotFound, NotAContext
from .names import CompositeNameParser, HierarchicalName, NameLike, as_name


class InMemoryContext:
    def __init__(self, parser: CompositeNameParser | None = None) -> None:
        self.parser = parser or CompositeNameParser()
        self._bindings: dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"InMemoryContext({sorted(self._bindings)!r})"

    def parse_name(self, text: str) -> HierarchicalName:
        return self.parser.parse(text)

    def _parent_of(self, n: HierarchicalName) -> InMemoryContext:
        """Resolve the context that holds the last segment of `n`."""
        ctx: InMemoryContext = self
        for i, seg in enumerate(n.segments[:-1]):
            if seg not in ctx._bindings:
                raise NameNotFound(f"Name not bound: {seg}", name=str(n.prefix(i + 1)))
            child = ctx._bindings[seg]
            if not isinstance(child, InMemoryContext):
                raise NotAContext(f"Not a context: {seg}", name=str(n.prefix(i + 1)))
            ctx = child
        return ctx

    def lookup(self, name: NameLike) -> Any:
        n = as_name(name, self.parser)
        parent = self._parent_of(n)
        if n.leaf not in parent._bindings:
            raise NameNotFound(f"Name not bound: {n.leaf}", name=str(n))
        return parent._bindings[n.leaf]

    def rebind(self, name: NameLike, value: Any) -> None:
        n = as_name(name, self.parser)
        parent = self._parent_of(n)
        parent._bindings[n.leaf] = value

    def create_subcontext(self, name: NameLike) -> InMemoryContext:
        n = as_name(name, self.parser)
        parent = self._parent_of(n)
        if n.leaf in parent._bindings:
            raise NameAlreadyBound(f"Name already bound: {n.leaf}", name=str(n))
        child = InMemoryContext(self.parser)
        parent._bindings[n.leaf] = child
        return child

    def unbind(self, name: NameLike) -> None:
        n = as_name(name, self.parser)
        parent = self._parent_of(n)
        parent._bindings.pop(n.leaf, None)

    def list(self) -> list[str]:
        return sorted(self._bindings)


_roots: dict[str, InMemoryContext] = {}
_roots_lock = threading.Lock()


def memory_root(url: str = "") -> InMemoryContext:
    """Shared root for a `memory://<name>` URL (one tree per name per process)."""
    key = (url or "").strip()
    if key.startswith("memory://"):
        key = key[len("memory://"):]
    key = key.strip("/") or "default"
    with _roots_lock:
        root = _roots.get(key)
        if root is None:
            root = InMemoryContext()
            _roots[key] = root
        return root


def reset_memory_roots() -> None:
    with _roots_lock:
        _roots.clear()
