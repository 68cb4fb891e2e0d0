from __future__ import annotations

import json
import logging
import ssl
from contextlib import contextmanager
from typing import Any, Iterator

from ldap3 import BASE, MODIFY_REPLACE, NONE, Connection, Server, Tls
from ldap3.core.exceptions import LDAPException
from ldap3.core.results import RESULT_ENTRY_ALREADY_EXISTS, RESULT_NO_SUCH_OBJECT
from ldap3.utils.dn import escape_rdn, parse_dn

from ..errors import NameAlreadyBound, NameNotFound, NamingFault
from ..names import CompositeNameParser, DnNameParser, HierarchicalName, NameLike, as_name
from .models import LdapConfig

log = logging.getLogger(__name__)


def _is_no_such_object(res: dict) -> bool:
    return res.get("result") == RESULT_NO_SUCH_OBJECT or res.get("description") == "noSuchObject"


def _is_already_exists(res: dict) -> bool:
    return res.get("result") == RESULT_ENTRY_ALREADY_EXISTS or res.get("description") == "entryAlreadyExists"


def _describe(res: dict) -> str:
    desc = res.get("description") or "unknown error"
    msg = res.get("message") or ""
    return f"{desc} ({msg})" if msg else desc


class LdapDirectory:
    """Connection settings and one-connection-per-operation sessions."""

    def __init__(self, cfg: LdapConfig) -> None:
        self.cfg = cfg
        tls = Tls(validate=ssl.CERT_REQUIRED if cfg.tls_validate else ssl.CERT_NONE)
        self.server = Server(
            host=cfg.host,
            port=cfg.port,
            use_ssl=cfg.use_ssl,
            get_info=NONE,
            tls=tls,
            connect_timeout=float(cfg.connect_timeout_s),
        )
        if cfg.name_syntax == "dn":
            self.parser = DnNameParser()
        else:
            self.parser = CompositeNameParser()

    def _conn(self) -> Connection:
        conn = Connection(
            self.server,
            user=self.cfg.bind_principal or None,
            password=self.cfg.bind_password or None,
            auto_bind=False,
        )
        conn.open()
        if self.cfg.starttls:
            conn.start_tls()
        return conn

    @contextmanager
    def session(self) -> Iterator[Connection]:
        conn: Connection | None = None
        try:
            conn = self._conn()
            if not conn.bind():
                res = dict(conn.result or {})
                raise NamingFault(f"LDAP bind failed: {_describe(res)}")
            yield conn
        except LDAPException as e:
            raise NamingFault(f"LDAP error: {e}") from e
        finally:
            if conn is not None:
                try:
                    conn.unbind()
                except LDAPException:
                    log.debug("LDAP unbind failed", exc_info=True)

    def root(self) -> "LdapContext":
        return LdapContext(self, self.cfg.base_dn)


class LdapContext:
    """A directory context backed by the LDAP entry at `dn`."""

    def __init__(self, directory: LdapDirectory, dn: str) -> None:
        self.directory = directory
        self.dn = dn

    def __repr__(self) -> str:
        return f"LdapContext({self.dn!r})"

    @property
    def cfg(self) -> LdapConfig:
        return self.directory.cfg

    def parse_name(self, text: str) -> HierarchicalName:
        return self.directory.parser.parse(text)

    def _rdn(self, segment: str) -> str:
        if self.cfg.name_syntax == "dn":
            return segment
        return f"{self.cfg.naming_attribute}={escape_rdn(segment)}"

    def _rdn_attributes(self, segment: str) -> dict[str, Any]:
        if self.cfg.name_syntax == "dn":
            return {attr: value for attr, value, _sep in parse_dn(segment)}
        return {self.cfg.naming_attribute: segment}

    def _dn(self, n: HierarchicalName) -> str:
        rdns = [self._rdn(seg) for seg in reversed(n.segments)]
        if self.dn:
            rdns.append(self.dn)
        return ",".join(rdns)

    def lookup(self, name: NameLike) -> Any:
        n = as_name(name, self.directory.parser)
        dn = self._dn(n)
        attrs = ["objectClass", self.cfg.value_attribute]
        with self.directory.session() as conn:
            ok = conn.search(
                search_base=dn,
                search_filter="(objectClass=*)",
                search_scope=BASE,
                attributes=attrs,
            )
            res = dict(conn.result or {})
            entries = list(conn.entries) if ok else []

        if not ok:
            if _is_no_such_object(res):
                raise NameNotFound(f"No such entry: {dn}", name=str(n))
            raise NamingFault(f"LDAP search failed: {_describe(res)}", name=str(n))
        if not entries:
            raise NameNotFound(f"No such entry: {dn}", name=str(n))

        ea = entries[0].entry_attributes_as_dict
        if self.cfg.is_context(ea.get("objectClass", [])):
            return LdapContext(self.directory, dn)

        raw = ea.get(self.cfg.value_attribute, [])
        if not raw:
            return None
        try:
            return json.loads(str(raw[0]))
        except ValueError as e:
            raise NamingFault(f"Undecodable value at {dn}: {e}", name=str(n)) from e

    def rebind(self, name: NameLike, value: Any) -> None:
        n = as_name(name, self.directory.parser)
        dn = self._dn(n)
        try:
            encoded = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise NamingFault(f"Value is not serializable: {e}", name=str(n)) from e

        with self.directory.session() as conn:
            ok = conn.modify(dn, {self.cfg.value_attribute: [(MODIFY_REPLACE, [encoded])]})
            if ok:
                return
            res = dict(conn.result or {})
            if not _is_no_such_object(res):
                raise NamingFault(f"LDAP modify failed: {_describe(res)}", name=str(n))

            # Entry is absent: create it. A missing parent is reported as not-found.
            attributes: dict[str, Any] = {"objectClass": list(self.cfg.leaf_object_classes)}
            attributes.update(self._rdn_attributes(n.leaf))
            attributes[self.cfg.value_attribute] = encoded
            ok = conn.add(dn, attributes=attributes)
            if ok:
                return
            res = dict(conn.result or {})

        if _is_no_such_object(res):
            raise NameNotFound(f"Parent context not found for {dn}", name=str(n))
        raise NamingFault(f"LDAP add failed: {_describe(res)}", name=str(n))

    def create_subcontext(self, name: NameLike) -> LdapContext:
        n = as_name(name, self.directory.parser)
        dn = self._dn(n)
        rdn_attrs = self._rdn_attributes(n.leaf)
        attributes: dict[str, Any] = {"objectClass": self.cfg.object_classes_for(next(iter(rdn_attrs)))}
        attributes.update(rdn_attrs)

        with self.directory.session() as conn:
            ok = conn.add(dn, attributes=attributes)
            res = dict(conn.result or {})

        if ok:
            return LdapContext(self.directory, dn)
        if _is_already_exists(res):
            raise NameAlreadyBound(f"Entry already exists: {dn}", name=str(n))
        if _is_no_such_object(res):
            raise NameNotFound(f"Parent context not found for {dn}", name=str(n))
        raise NamingFault(f"LDAP add failed: {_describe(res)}", name=str(n))
