"""LDAP directory provider.

Public API:
    - LdapConfig
    - LdapDirectory
    - LdapContext
"""

from .models import LdapConfig
from .client import LdapContext, LdapDirectory

__all__ = ["LdapConfig", "LdapDirectory", "LdapContext"]
