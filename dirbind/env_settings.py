from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class EnvSettings(BaseSettings):
    """Process environment defaults, used where a configuration map is silent."""

    context_factory: str = Field("memory", alias="DIRBIND_CONTEXT_FACTORY")
    provider_url: str = Field("memory://default", alias="DIRBIND_PROVIDER_URL")

    ldap_bind_user: str = Field("", alias="DIRBIND_LDAP_BIND_USER")
    ldap_bind_password: str = Field("", alias="DIRBIND_LDAP_BIND_PASSWORD")
    ldap_tls_validate: bool = Field(False, alias="DIRBIND_LDAP_TLS_VALIDATE")
    ldap_connect_timeout_s: float = Field(5.0, alias="DIRBIND_LDAP_CONNECT_TIMEOUT")

    log_level: str = Field("INFO", alias="DIRBIND_LOG_LEVEL")
    log_dir: str = Field("", alias="DIRBIND_LOG_DIR")

    class Config:
        populate_by_name = True


@lru_cache(maxsize=1)
def get_env() -> EnvSettings:
    return EnvSettings()
