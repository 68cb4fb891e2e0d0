from __future__ import annotations

from typing import Any, Mapping

from .directory import DirectoryNode
from .env_settings import EnvSettings, get_env
from .errors import ContextUnavailableError
from .ldap import LdapConfig, LdapDirectory
from .memory import memory_root
from .observer import Observer
from .properties import CONTEXT_FACTORY, PROVIDER_URL, extract_directory_properties

# Pass-through keys (after prefix stripping) understood by the LDAP provider.
SECURITY_PRINCIPAL = "security.principal"
SECURITY_CREDENTIALS = "security.credentials"
LDAP_STARTTLS = "ldap.starttls"
LDAP_TLS_VALIDATE = "ldap.tls_validate"
LDAP_NAME_SYNTAX = "ldap.name_syntax"


def _as_bool(v: Any) -> bool | None:
    if v is None:
        return None
    if isinstance(v, bool):
        return v
    return str(v).strip().lower() in ("1", "true", "yes", "on")


def _ldap_root(url: str, props: Mapping[str, Any], env: EnvSettings) -> DirectoryNode:
    tls_validate = _as_bool(props.get(LDAP_TLS_VALIDATE))
    cfg = LdapConfig.from_url(
        url,
        bind_principal=props.get(SECURITY_PRINCIPAL) or env.ldap_bind_user or None,
        bind_password=props.get(SECURITY_CREDENTIALS) or env.ldap_bind_password or None,
        starttls=_as_bool(props.get(LDAP_STARTTLS)),
        tls_validate=env.ldap_tls_validate if tls_validate is None else tls_validate,
        connect_timeout_s=env.ldap_connect_timeout_s,
        name_syntax=props.get(LDAP_NAME_SYNTAX),
    )
    return LdapDirectory(cfg).root()


_FACTORIES = {
    "memory": lambda url, props, env: memory_root(url),
    "ldap": _ldap_root,
}


def initial_context(
    config: Mapping[Any, Any] | None = None,
    observer: Observer | None = None,
    env: EnvSettings | None = None,
) -> DirectoryNode:
    """Obtain the root context described by a configuration map.

    Directory entries missing from `config` fall back to the environment
    (`DIRBIND_CONTEXT_FACTORY`, `DIRBIND_PROVIDER_URL`).
    """
    observer = observer or Observer()
    props = extract_directory_properties(config or {})
    observer.context_properties(props)

    try:
        env = env or get_env()
        kind = str(props.get(CONTEXT_FACTORY) or env.context_factory).strip().lower()
        url = str(props.get(PROVIDER_URL) or env.provider_url)
        factory = _FACTORIES.get(kind)
        if factory is None:
            raise ValueError(f"Unknown context factory: {kind!r}")
        return factory(url, props, env)
    except Exception as e:
        observer.root_context_failed(e)
        raise ContextUnavailableError(f"Could not obtain root context: {e}", cause=e) from e
