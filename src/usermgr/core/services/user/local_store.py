"""Locally managed users stored in the ``EmailUser`` table."""

import time
from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.usermgr.core.errors import BackendUnavailableError, UserAlreadyExistsError
from src.usermgr.core.security import hash_password, verify_password
from src.usermgr.core.services.database.db_session import DbSessionService
from src.usermgr.entities.email_user import EmailUser, EmailUserRepository

# start/limit pair meaning "the whole table"
LIST_ALL = -1


class LocalUserStore:
    """CRUD, lookup and counting of users in the local database."""

    def __init__(self, db: DbSessionService):
        self._db = db

    @contextmanager
    def _repository(self) -> Iterator[EmailUserRepository]:
        try:
            with self._db.session_scope() as session:
                yield EmailUserRepository(session)
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            raise BackendUnavailableError(f"User database unavailable: {e}") from e

    def add(self, email: str, password: str, is_staff: bool = False, is_active: bool = True) -> EmailUser:
        """Insert a new user.

        Raises:
            UserAlreadyExistsError: If the email is already stored
        """
        try:
            with self._repository() as repo:
                user = repo.create(
                    email=email,
                    passwd=hash_password(password),
                    is_staff=is_staff,
                    is_active=is_active,
                    ctime=int(time.time()),
                )
        except IntegrityError as e:
            raise UserAlreadyExistsError(email) from e

        logger.info("Added local user {} (id={})", email, user.id)
        return user

    def remove(self, email: str) -> None:
        """Delete a user by email; unknown emails are ignored."""
        with self._repository() as repo:
            removed = repo.delete_by_email(email)
        if removed:
            logger.info("Removed local user {}", email)

    def validate(self, email: str, password: str) -> bool:
        user = self.get_by_email(email)
        if user is None:
            return False
        return verify_password(password, user.passwd)

    def get_by_email(self, email: str) -> EmailUser | None:
        with self._repository() as repo:
            return repo.get_by_email(email)

    def get_by_email_and_password(self, email: str, password: str) -> EmailUser | None:
        """Return the user only when the password matches its stored digest."""
        with self._repository() as repo:
            return repo.get_by_email_and_digest(email, hash_password(password))

    def get_by_id(self, user_id: int) -> EmailUser | None:
        with self._repository() as repo:
            return repo.get(user_id)

    def list(self, start: int = LIST_ALL, limit: int = LIST_ALL) -> list[EmailUser]:
        """Return users ordered by id.

        ``(-1, -1)`` returns every user. Otherwise at most ``limit`` users are
        returned starting at offset ``start``; a negative start counts as 0 and
        a negative limit means no limit.
        """
        offset, row_limit = page_bounds(start, limit)
        with self._repository() as repo:
            return repo.list_all(offset=offset, limit=row_limit)

    def count(self) -> int:
        with self._repository() as repo:
            return repo.count()

    def update(self, user_id: int, password: str, is_staff: bool, is_active: bool) -> None:
        """Rewrite password and flags of an existing user; unknown ids are ignored."""
        with self._repository() as repo:
            updated = repo.update(
                user_id,
                passwd=hash_password(password),
                is_staff=is_staff,
                is_active=is_active,
            )
        if updated:
            logger.info("Updated local user id={}", user_id)
        else:
            logger.debug("Update skipped, no local user with id={}", user_id)


def page_bounds(start: int, limit: int) -> tuple[int, int | None]:
    """Translate a ``(start, limit)`` request into an offset and optional limit."""
    if start == LIST_ALL and limit == LIST_ALL:
        return 0, None
    return max(start, 0), (limit if limit >= 0 else None)
