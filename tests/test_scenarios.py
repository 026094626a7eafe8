"""End-to-end flows through UserManager.from_config."""

from pathlib import Path
from unittest.mock import patch

import pytest

from src.usermgr.core.services.user import UserManager
from src.usermgr.runtime.config import AppConfig, ConfigData, LdapConfig, LoggingConfig
from tests.fixtures.ldap import LDAP_BASE, SERVICE_DN, SERVICE_PASSWORD, FakeLdapServer


def test_local_only_lifecycle(file_config: ConfigData, tmp_path: Path):
    manager = UserManager.from_config(file_config)
    assert manager.use_directory is False
    assert (tmp_path / "PeerMgr" / "usermgr.db").exists()

    manager.add_user("a@x.com", "pw", is_staff=False, is_active=True)

    assert manager.validate_user("a@x.com", "pw") is True
    assert manager.validate_user("a@x.com", "wrong") is False
    assert manager.count_users() == 1

    manager.remove_user("a@x.com")

    assert manager.count_users() == 0


def test_local_data_survives_restart(file_config: ConfigData):
    UserManager.from_config(file_config).add_user("a@x.com", "pw")

    reopened = UserManager.from_config(file_config)

    assert reopened.validate_user("a@x.com", "pw") is True
    assert reopened.count_users() == 1


class TestDirectoryMode:
    @pytest.fixture
    def config(self, tmp_path: Path) -> ConfigData:
        return ConfigData(
            app=AppConfig(environment="test", config_dir=str(tmp_path)),
            ldap=LdapConfig(
                host="ldap://ldap.example.com",
                base=LDAP_BASE,
                user_dn=SERVICE_DN,
                password=SERVICE_PASSWORD,
            ),
            logging=LoggingConfig(level="WARNING"),
        )

    @pytest.fixture
    def manager(self, config: ConfigData, ldap_server: FakeLdapServer):
        ldap_server.add_user("bob", "bob@x.com", "bob-secret")

        def connect(server, user=None, password=None, **kwargs):
            return ldap_server.connect(user, password)

        with patch("src.usermgr.core.services.user.ldap_directory.Connection", side_effect=connect):
            yield UserManager.from_config(config)

    def test_validate_binds_as_entry(self, manager: UserManager, ldap_server: FakeLdapServer):
        assert manager.use_directory is True

        assert manager.validate_user("bob@x.com", "bob-secret") is True
        assert ldap_server.binds == [SERVICE_DN, f"uid=bob,ou=people,{LDAP_BASE}"]

    def test_validate_rejected_by_second_bind(self, manager: UserManager, ldap_server: FakeLdapServer):
        assert manager.validate_user("bob@x.com", "wrong") is False
        assert ldap_server.binds[-1] == f"uid=bob,ou=people,{LDAP_BASE}"
        assert ldap_server.open_connections == 0

    def test_lookup_by_id_finds_nothing(self, manager: UserManager):
        assert manager.get_user_by_id(1) is None
