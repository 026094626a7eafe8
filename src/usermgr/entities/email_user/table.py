"""EmailUser database table model."""

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from src.usermgr.entities._types import DIGEST_TYPE, EMAIL_TYPE, TABLE_KWARGS


class EmailUserTable(SQLModel, table=True):
    """Database persistence model for locally managed users.

    Column names and the table name match databases created by earlier
    daemon releases.
    """

    __tablename__ = "EmailUser"  # type: ignore[assignment]
    __table_args__ = {**TABLE_KWARGS, "sqlite_autoincrement": True}

    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(
        sa_column=sa.Column("email", EMAIL_TYPE, unique=True, index=True)
    )
    passwd: str = Field(sa_column=sa.Column("passwd", DIGEST_TYPE))
    is_staff: bool = Field(sa_column=sa.Column("is_staff", sa.Boolean, nullable=False))
    is_active: bool = Field(sa_column=sa.Column("is_active", sa.Boolean, nullable=False))
    ctime: int = Field(sa_column=sa.Column("ctime", sa.BigInteger))
