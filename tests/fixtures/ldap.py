"""In-process stand-in for an LDAP server reached through ldap3."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest
from ldap3.core.exceptions import LDAPSocketOpenError

from src.usermgr.core.services.user.ldap_directory import LdapDirectory
from src.usermgr.runtime.config.config_data import LdapConfig

LDAP_BASE = "dc=example,dc=com"
SERVICE_DN = f"cn=admin,{LDAP_BASE}"
SERVICE_PASSWORD = "admin-secret"

_SUCCESS = {"result": 0, "description": "success"}
_INVALID_CREDENTIALS = {"result": 49, "description": "invalidCredentials"}
_NO_SUCH_OBJECT = {"result": 32, "description": "noSuchObject"}


@dataclass
class FakeLdapServer:
    """Directory contents plus switches to simulate failures."""

    base: str = LDAP_BASE
    login_attr: str = "mail"
    passwords: dict[str, str] = field(default_factory=lambda: {SERVICE_DN: SERVICE_PASSWORD})
    entries: dict[str, dict[str, list[str]]] = field(default_factory=dict)
    reachable: bool = True
    search_fails: bool = False
    filters: list[str] = field(default_factory=list)
    binds: list[str | None] = field(default_factory=list)
    open_connections: int = 0

    def add_user(self, uid: str, email: str, password: str) -> str:
        dn = f"uid={uid},ou=people,{self.base}"
        self.entries[dn] = {self.login_attr: [email]}
        self.passwords[dn] = password
        return dn

    def connect(self, user_dn: str | None, password: str | None) -> FakeConnection:
        return FakeConnection(self, user_dn, password)


class FakeConnection:
    """Implements the slice of ``ldap3.Connection`` the directory adapter uses."""

    def __init__(self, server: FakeLdapServer, user: str | None, password: str | None):
        self._server = server
        self._user = user
        self._password = password
        self._opened = False
        self.result: dict[str, Any] = {}
        self.response: list[dict[str, Any]] = []

    def bind(self) -> bool:
        if not self._server.reachable:
            raise LDAPSocketOpenError("socket connection error")
        self._opened = True
        self._server.open_connections += 1
        self._server.binds.append(self._user)
        if self._user is None:
            self.result = dict(_SUCCESS)
            return True
        if self._password and self._server.passwords.get(self._user) == self._password:
            self.result = dict(_SUCCESS)
            return True
        self.result = dict(_INVALID_CREDENTIALS)
        return False

    def search(self, search_base, search_filter, search_scope=None, attributes=None) -> bool:
        self._server.filters.append(search_filter)
        if self._server.search_fails or search_base != self._server.base:
            self.result = dict(_NO_SUCH_OBJECT)
            self.response = []
            return False

        attr, value = search_filter.strip("()").split("=", 1)
        self.response = [
            {"type": "searchResEntry", "dn": dn, "attributes": {attr: list(attrs.get(attr, []))}}
            for dn, attrs in self._server.entries.items()
            if value == "*" or value in attrs.get(attr, [])
        ]
        self.result = dict(_SUCCESS)
        return bool(self.response)

    def unbind(self) -> bool:
        if self._opened:
            self._server.open_connections -= 1
            self._opened = False
        return True


@pytest.fixture
def ldap_server() -> FakeLdapServer:
    return FakeLdapServer()


@pytest.fixture
def ldap_config() -> LdapConfig:
    return LdapConfig(
        host="ldap://ldap.example.com",
        base=LDAP_BASE,
        user_dn=SERVICE_DN,
        password=SERVICE_PASSWORD,
    )


@pytest.fixture
def directory(ldap_config: LdapConfig, ldap_server: FakeLdapServer) -> LdapDirectory:
    return LdapDirectory(ldap_config, connection_factory=ldap_server.connect)
