"""Binding table between user emails and peer ids.

Rows are owned by the peer subsystem; this package only creates the table.
It has no primary key, so it is declared as a plain table on the shared
metadata instead of a mapped model.
"""

import sqlalchemy as sa
from sqlmodel import SQLModel

from src.usermgr.entities._types import EMAIL_TYPE, PEER_ID_TYPE, TABLE_KWARGS

binding_table = sa.Table(
    "Binding",
    SQLModel.metadata,
    sa.Column("email", EMAIL_TYPE),
    sa.Column("peer_id", PEER_ID_TYPE),
    sa.Index("binding_email_index", "email", unique=True),
    sa.Index("binding_peer_index", "peer_id", unique=True),
    **TABLE_KWARGS,
)
