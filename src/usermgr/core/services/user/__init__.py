from .ldap_directory import LdapDirectory
from .local_store import LocalUserStore
from .user_manager import UserManager

__all__ = ["LdapDirectory", "LocalUserStore", "UserManager"]
