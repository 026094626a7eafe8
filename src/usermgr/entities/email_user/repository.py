"""EmailUser repository for database operations."""

from sqlalchemy import func
from sqlmodel import Session, select

from .entity import EmailUser
from .table import EmailUserTable


class EmailUserRepository:
    """Data-access layer for locally stored users.

    All statements bind their values; nothing user-supplied is formatted into
    SQL text.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @staticmethod
    def _to_entity(row: EmailUserTable) -> EmailUser:
        return EmailUser.model_validate(row, from_attributes=True)

    def create(self, email: str, passwd: str, is_staff: bool, is_active: bool, ctime: int) -> EmailUser:
        row = EmailUserTable(
            email=email,
            passwd=passwd,
            is_staff=is_staff,
            is_active=is_active,
            ctime=ctime,
        )
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return self._to_entity(row)

    def get(self, user_id: int) -> EmailUser | None:
        row = self._session.get(EmailUserTable, user_id)
        if row is None:
            return None
        return self._to_entity(row)

    def get_by_email(self, email: str) -> EmailUser | None:
        statement = select(EmailUserTable).where(EmailUserTable.email == email)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return self._to_entity(row)

    def get_by_email_and_digest(self, email: str, passwd: str) -> EmailUser | None:
        statement = select(EmailUserTable).where(
            (EmailUserTable.email == email) & (EmailUserTable.passwd == passwd)
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return self._to_entity(row)

    def list_all(self, offset: int = 0, limit: int | None = None) -> list[EmailUser]:
        statement = select(EmailUserTable).order_by(EmailUserTable.id)
        if offset:
            statement = statement.offset(offset)
        if limit is not None:
            statement = statement.limit(limit)
        return [self._to_entity(row) for row in self._session.exec(statement)]

    def count(self) -> int:
        statement = select(func.count()).select_from(EmailUserTable)
        return self._session.exec(statement).one()

    def update(self, user_id: int, passwd: str, is_staff: bool, is_active: bool) -> bool:
        """Rewrite digest and flags; returns False when the id is unknown."""
        row = self._session.get(EmailUserTable, user_id)
        if row is None:
            return False
        row.passwd = passwd
        row.is_staff = is_staff
        row.is_active = is_active
        self._session.add(row)
        self._session.flush()
        return True

    def delete_by_email(self, email: str) -> bool:
        statement = select(EmailUserTable).where(EmailUserTable.email == email)
        row = self._session.exec(statement).first()
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True
