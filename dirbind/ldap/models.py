from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable
from urllib.parse import unquote, urlsplit

from ..errors import InvalidNameError

NAME_SYNTAXES = ("composite", "dn")


@dataclass
class LdapConfig:
    host: str
    port: int = 389
    use_ssl: bool = False
    starttls: bool = False
    bind_principal: str = ""
    bind_password: str = ""
    base_dn: str = ""
    tls_validate: bool = False
    connect_timeout_s: float = 5.0
    # "composite": a/b/c mapped to cn= RDNs; "dn": names are DNs (cn=c,ou=b,ou=a)
    name_syntax: str = "composite"
    naming_attribute: str = "cn"
    value_attribute: str = "description"
    # Object classes that make an existing entry a context on lookup.
    context_classes: tuple[str, ...] = field(default=("organizationalUnit", "container"))
    # Object classes for new contexts, chosen by the RDN attribute of the segment.
    context_object_classes_by_attribute: dict[str, tuple[str, ...]] = field(default_factory=lambda: {
        "ou": ("top", "organizationalUnit"),
        "cn": ("top", "container"),
    })
    context_object_classes: tuple[str, ...] = field(default=("top", "container"))
    leaf_object_classes: tuple[str, ...] = field(default=("top", "applicationProcess"))

    def __post_init__(self) -> None:
        syntax = (self.name_syntax or "composite").strip().lower()
        if syntax not in NAME_SYNTAXES:
            raise ValueError(f"Unknown name syntax: {self.name_syntax!r}")
        self.name_syntax = syntax

    def is_context(self, object_classes: Iterable[Any]) -> bool:
        wanted = {c.lower() for c in self.context_classes}
        return any(str(c).lower() in wanted for c in object_classes)

    def object_classes_for(self, rdn_attribute: str) -> list[str]:
        """Object classes for a new context named by `rdn_attribute` (ou, cn, ...)."""
        by_attr = {k.lower(): v for k, v in self.context_object_classes_by_attribute.items()}
        return list(by_attr.get(rdn_attribute.lower(), self.context_object_classes))

    @classmethod
    def from_url(cls, url: str, **overrides: Any) -> "LdapConfig":
        """Build from `ldap://host:port/<base dn>` or `ldaps://...`."""
        parts = urlsplit((url or "").strip())
        scheme = (parts.scheme or "").lower()
        if scheme not in ("ldap", "ldaps"):
            raise InvalidNameError(f"Unsupported provider URL scheme: {url!r}")
        if not parts.hostname:
            raise InvalidNameError(f"Provider URL has no host: {url!r}")

        use_ssl = scheme == "ldaps"
        cfg = cls(
            host=parts.hostname,
            port=parts.port or (636 if use_ssl else 389),
            use_ssl=use_ssl,
            base_dn=unquote(parts.path.lstrip("/")),
        )
        known = {k: v for k, v in overrides.items() if v is not None}
        return replace(cfg, **known) if known else cfg
