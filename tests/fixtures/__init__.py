"""Shared pytest fixtures and helpers for user store tests."""

from .core import *  # noqa: F401,F403
from .ldap import *  # noqa: F401,F403
