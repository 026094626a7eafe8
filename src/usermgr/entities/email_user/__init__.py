"""EmailUser entity module.

This module contains all EmailUser-related classes organized by responsibility:
- EmailUser: Domain entity shared by the local store and the directory
- EmailUserTable: Database persistence model
- EmailUserRepository: Data access layer
"""

from .entity import DIRECTORY_USER_ID, EmailUser
from .repository import EmailUserRepository
from .table import EmailUserTable

__all__ = ["DIRECTORY_USER_ID", "EmailUser", "EmailUserRepository", "EmailUserTable"]
