"""
Pytest configuration and shared fixtures for dirbind tests.
"""

from unittest.mock import MagicMock

import pytest

from dirbind import InMemoryContext, NamingClient, Observer
from dirbind.env_settings import get_env
from dirbind.ldap import LdapConfig, LdapDirectory
from dirbind.memory import reset_memory_roots


class RecordingObserver(Observer):
    """Observer that keeps (event, argument) pairs instead of logging."""

    def __init__(self):
        super().__init__()
        self.events = []

    def binding(self, name):
        self.events.append(("binding", str(name)))

    def bound(self, name):
        self.events.append(("bound", str(name)))

    def intermediate_lookup(self, segment):
        self.events.append(("intermediate_lookup", segment))

    def found_intermediate(self, segment):
        self.events.append(("found_intermediate", segment))

    def creating_intermediate(self, segment):
        self.events.append(("creating_intermediate", segment))

    def lookup(self, name):
        self.events.append(("lookup", str(name)))

    def names(self, event):
        return [arg for ev, arg in self.events if ev == event]


@pytest.fixture(autouse=True)
def _clean_state():
    reset_memory_roots()
    get_env.cache_clear()
    yield
    reset_memory_roots()
    get_env.cache_clear()


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def client(observer):
    return NamingClient(observer=observer)


@pytest.fixture
def root():
    return InMemoryContext()


@pytest.fixture
def ldap_conn():
    """Fake ldap3 Connection: binds successfully, every operation must be stubbed."""
    conn = MagicMock()
    conn.bind.return_value = True
    conn.result = {"result": 0, "description": "success"}
    conn.entries = []
    return conn


@pytest.fixture
def ldap_directory(ldap_conn, monkeypatch):
    directory = LdapDirectory(LdapConfig(host="dc01.example.local", base_dn="DC=example,DC=local"))
    monkeypatch.setattr(directory, "_conn", lambda: ldap_conn)
    return directory
