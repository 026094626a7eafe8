"""User identity resolution backed by a local SQL store or an LDAP directory."""

__version__ = "0.1.0"
