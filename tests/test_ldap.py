"""
Tests for the LDAP directory provider against a fake ldap3 connection.
"""

from unittest.mock import MagicMock

import pytest
from ldap3 import BASE, MODIFY_REPLACE
from ldap3.core.exceptions import LDAPException

from dirbind import DirectoryNode, NameAlreadyBound, NameNotFound, NamingFault
from dirbind.errors import InvalidNameError
from dirbind.ldap import LdapConfig, LdapContext, LdapDirectory

NO_SUCH_OBJECT = {"result": 32, "description": "noSuchObject", "message": ""}
ALREADY_EXISTS = {"result": 68, "description": "entryAlreadyExists", "message": ""}


def _entry(attrs):
    e = MagicMock()
    e.entry_attributes_as_dict = attrs
    return e


class TestLdapConfig:

    def test_from_ldaps_url(self):
        cfg = LdapConfig.from_url("ldaps://dc01.example.local/OU=Apps,DC=example,DC=local")
        assert cfg.host == "dc01.example.local"
        assert cfg.port == 636
        assert cfg.use_ssl is True
        assert cfg.base_dn == "OU=Apps,DC=example,DC=local"

    def test_from_url_with_port_and_overrides(self):
        cfg = LdapConfig.from_url("ldap://10.0.0.5:3389", starttls=True, bind_principal=None)
        assert (cfg.host, cfg.port, cfg.use_ssl, cfg.starttls) == ("10.0.0.5", 3389, False, True)
        assert cfg.bind_principal == ""
        assert cfg.base_dn == ""

    @pytest.mark.parametrize("url", ["http://dc01", "ldap://", ""])
    def test_bad_urls(self, url):
        with pytest.raises(InvalidNameError):
            LdapConfig.from_url(url)


class TestLdapContext:

    def test_names_map_to_dns(self, ldap_directory):
        root = ldap_directory.root()
        assert isinstance(root, DirectoryNode)
        assert root._dn(root.parse_name("apps/billing,eu")) == r"cn=billing\,eu,cn=apps,DC=example,DC=local"

    def test_lookup_context(self, ldap_directory, ldap_conn):
        ldap_conn.search.return_value = True
        ldap_conn.entries = [_entry({"objectClass": ["top", "container"], "description": []})]

        found = ldap_directory.root().lookup("apps")

        assert isinstance(found, LdapContext)
        assert found.dn == "cn=apps,DC=example,DC=local"
        kwargs = ldap_conn.search.call_args.kwargs
        assert kwargs["search_base"] == "cn=apps,DC=example,DC=local"
        assert kwargs["search_scope"] == BASE
        ldap_conn.unbind.assert_called_once()

    def test_lookup_value(self, ldap_directory, ldap_conn):
        ldap_conn.search.return_value = True
        ldap_conn.entries = [_entry({
            "objectClass": ["top", "applicationProcess"],
            "description": ['{"dsn": "postgresql://db/billing"}'],
        })]

        assert ldap_directory.root().lookup("apps/ds") == {"dsn": "postgresql://db/billing"}

    def test_lookup_missing(self, ldap_directory, ldap_conn):
        ldap_conn.search.return_value = False
        ldap_conn.result = NO_SUCH_OBJECT

        with pytest.raises(NameNotFound):
            ldap_directory.root().lookup("apps")

    def test_lookup_other_failure(self, ldap_directory, ldap_conn):
        ldap_conn.search.return_value = False
        ldap_conn.result = {"result": 50, "description": "insufficientAccessRights"}

        with pytest.raises(NamingFault) as exc_info:
            ldap_directory.root().lookup("apps")
        assert not isinstance(exc_info.value, NameNotFound)
        assert "insufficientAccessRights" in str(exc_info.value)

    def test_rebind_existing_entry(self, ldap_directory, ldap_conn):
        ldap_conn.modify.return_value = True

        ldap_directory.root().rebind("apps/ds", [1, 2])

        dn, changes = ldap_conn.modify.call_args.args
        assert dn == "cn=ds,cn=apps,DC=example,DC=local"
        assert changes == {"description": [(MODIFY_REPLACE, ["[1, 2]"])]}
        ldap_conn.add.assert_not_called()

    def test_rebind_adds_absent_entry(self, ldap_directory, ldap_conn):
        ldap_conn.modify.return_value = False
        ldap_conn.result = NO_SUCH_OBJECT
        ldap_conn.add.return_value = True

        ldap_directory.root().rebind("ds", "x")

        args, kwargs = ldap_conn.add.call_args
        assert args[0] == "cn=ds,DC=example,DC=local"
        assert kwargs["attributes"] == {
            "objectClass": ["top", "applicationProcess"],
            "cn": "ds",
            "description": '"x"',
        }

    def test_rebind_missing_parent(self, ldap_directory, ldap_conn):
        ldap_conn.modify.return_value = False
        ldap_conn.add.return_value = False
        ldap_conn.result = NO_SUCH_OBJECT

        with pytest.raises(NameNotFound):
            ldap_directory.root().rebind("apps/ds", "x")

    def test_rebind_unserializable_value(self, ldap_directory, ldap_conn):
        with pytest.raises(NamingFault):
            ldap_directory.root().rebind("ds", object())
        ldap_conn.modify.assert_not_called()

    def test_create_subcontext(self, ldap_directory, ldap_conn):
        ldap_conn.add.return_value = True

        child = ldap_directory.root().create_subcontext("apps")

        assert child.dn == "cn=apps,DC=example,DC=local"
        assert ldap_conn.add.call_args.kwargs["attributes"] == {
            "objectClass": ["top", "container"],
            "cn": "apps",
        }

    def test_create_subcontext_exists(self, ldap_directory, ldap_conn):
        ldap_conn.add.return_value = False
        ldap_conn.result = ALREADY_EXISTS

        with pytest.raises(NameAlreadyBound):
            ldap_directory.root().create_subcontext("apps")


class TestLdapSession:

    def test_failed_bind(self, ldap_directory, ldap_conn):
        ldap_conn.bind.return_value = False
        ldap_conn.result = {"result": 49, "description": "invalidCredentials"}

        with pytest.raises(NamingFault) as exc_info:
            ldap_directory.root().lookup("apps")
        assert "invalidCredentials" in str(exc_info.value)
        ldap_conn.search.assert_not_called()
        ldap_conn.unbind.assert_called_once()

    def test_ldap_exception_is_wrapped(self, ldap_directory, ldap_conn):
        ldap_conn.search.side_effect = LDAPException("socket closed")

        with pytest.raises(NamingFault) as exc_info:
            ldap_directory.root().lookup("apps")
        assert isinstance(exc_info.value.__cause__, LDAPException)
        ldap_conn.unbind.assert_called_once()

    def test_starttls(self, ldap_conn, monkeypatch):
        directory = LdapDirectory(LdapConfig(host="dc01", starttls=True))
        monkeypatch.setattr("dirbind.ldap.client.Connection", MagicMock(return_value=ldap_conn))

        with directory.session() as conn:
            assert conn is ldap_conn

        ldap_conn.open.assert_called_once()
        ldap_conn.start_tls.assert_called_once()

    def test_dn_name_syntax(self):
        directory = LdapDirectory(LdapConfig(host="dc01", base_dn="DC=example,DC=local", name_syntax="dn"))
        root = directory.root()

        n = root.parse_name("cn=ds,ou=Apps")
        assert n.segments == ("ou=Apps", "cn=ds")
        assert root._dn(n) == "cn=ds,ou=Apps,DC=example,DC=local"
        assert root._rdn_attributes("ou=Apps") == {"ou": "Apps"}


@pytest.fixture
def dn_directory(ldap_conn, monkeypatch):
    directory = LdapDirectory(LdapConfig(host="dc01", base_dn="DC=example,DC=local", name_syntax=" DN "))
    monkeypatch.setattr(directory, "_conn", lambda: ldap_conn)
    return directory


class TestOrganizationalUnits:

    def test_name_syntax_is_normalized(self):
        assert LdapConfig(host="dc01", name_syntax=" DN ").name_syntax == "dn"
        assert LdapConfig(host="dc01", name_syntax=None).name_syntax == "composite"
        with pytest.raises(ValueError):
            LdapConfig(host="dc01", name_syntax="x500")

    def test_lookup_existing_ou(self, dn_directory, ldap_conn):
        ldap_conn.search.return_value = True
        ldap_conn.entries = [_entry({"objectClass": ["top", "organizationalUnit"], "description": []})]

        found = dn_directory.root().lookup("ou=Apps")

        assert isinstance(found, LdapContext)
        assert found.dn == "ou=Apps,DC=example,DC=local"

    def test_bind_reuses_existing_ou(self, dn_directory, ldap_conn, client, observer):
        # direct rebind: entry and parent missing; leaf rebind inside the OU succeeds
        ldap_conn.modify.side_effect = [False, True]
        ldap_conn.add.return_value = False
        ldap_conn.result = NO_SUCH_OBJECT
        ldap_conn.search.return_value = True
        ldap_conn.entries = [_entry({"objectClass": ["top", "organizationalUnit"], "description": []})]

        client.bind("cn=ds,ou=Apps", "x", dn_directory.root())

        assert observer.names("found_intermediate") == ["ou=Apps"]
        assert observer.names("creating_intermediate") == []
        assert ldap_conn.add.call_count == 1
        assert ldap_conn.modify.call_args.args[0] == "cn=ds,ou=Apps,DC=example,DC=local"

    def test_create_ou_subcontext(self, dn_directory, ldap_conn):
        ldap_conn.add.return_value = True

        child = dn_directory.root().create_subcontext("ou=Apps")

        assert child.dn == "ou=Apps,DC=example,DC=local"
        assert ldap_conn.add.call_args.kwargs["attributes"] == {
            "objectClass": ["top", "organizationalUnit"],
            "ou": "Apps",
        }

    def test_create_cn_subcontext_in_dn_syntax(self, dn_directory, ldap_conn):
        ldap_conn.add.return_value = True

        dn_directory.root().create_subcontext("cn=Services")

        assert ldap_conn.add.call_args.kwargs["attributes"]["objectClass"] == ["top", "container"]
