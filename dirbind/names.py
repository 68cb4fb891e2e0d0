from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Union

from ldap3.core.exceptions import LDAPInvalidDnError
from ldap3.utils.dn import parse_dn, to_dn

from .errors import InvalidNameError


@dataclass(frozen=True)
class HierarchicalName:
    """Ordered path of segments, resolved one level at a time from a root."""

    segments: tuple[str, ...]

    def __post_init__(self) -> None:
        segs = tuple(self.segments)
        if not segs:
            raise InvalidNameError("Name must have at least one segment")
        for s in segs:
            if not isinstance(s, str) or not s:
                raise InvalidNameError(f"Empty or non-string segment in {segs!r}")
        object.__setattr__(self, "segments", segs)

    def __len__(self) -> int:
        return len(self.segments)

    def __getitem__(self, index: int) -> str:
        return self.segments[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self.segments)

    def __str__(self) -> str:
        return "/".join(s.replace("/", "\\/") for s in self.segments)

    def get(self, index: int) -> str:
        return self.segments[index]

    def suffix(self, count: int) -> HierarchicalName:
        """Drop the first `count` segments (at least one must remain)."""
        return HierarchicalName(self.segments[count:])

    def prefix(self, count: int) -> HierarchicalName:
        return HierarchicalName(self.segments[:count])

    @property
    def leaf(self) -> str:
        return self.segments[-1]


NameLike = Union[str, HierarchicalName]


class CompositeNameParser:
    """Splits `a/b/c` style names; a backslash escapes the next character."""

    def __init__(self, separator: str = "/") -> None:
        if len(separator) != 1 or separator == "\\":
            raise ValueError(f"Invalid separator: {separator!r}")
        self.separator = separator

    def parse(self, text: str) -> HierarchicalName:
        s = (text or "").strip()
        if not s:
            raise InvalidNameError("Empty name")

        segments: list[str] = []
        cur: list[str] = []
        esc = False
        for ch in s:
            if esc:
                cur.append(ch)
                esc = False
                continue
            if ch == "\\":
                esc = True
                continue
            if ch == self.separator:
                segments.append("".join(cur).strip())
                cur = []
                continue
            cur.append(ch)
        if esc:
            raise InvalidNameError(f"Dangling escape in name: {text!r}")
        segments.append("".join(cur).strip())

        if any(not seg for seg in segments):
            raise InvalidNameError(f"Empty segment in name: {text!r}")
        return HierarchicalName(tuple(segments))


class DnNameParser:
    """Parses LDAP DNs (`cn=c,ou=b,ou=a`) into root-first RDN segments."""

    def parse(self, text: str) -> HierarchicalName:
        s = (text or "").strip()
        if not s:
            raise InvalidNameError("Empty DN")
        try:
            # parse_dn validates the syntax, to_dn keeps multi-valued RDNs together
            parse_dn(s)
            rdns = to_dn(s, decompose=False, remove_space=True)
        except LDAPInvalidDnError as e:
            raise InvalidNameError(f"Malformed DN {text!r}: {e}") from e
        return HierarchicalName(tuple(reversed([r for r in rdns if r])))


def as_name(name: NameLike, parser) -> HierarchicalName:
    if isinstance(name, HierarchicalName):
        return name
    return parser.parse(name)
