"""Column types shared by the user tables, varied per SQL dialect."""

import sqlalchemy as sa

# SQLite stores everything as TEXT; client/server engines get fixed widths.
EMAIL_TYPE = sa.String(255).with_variant(sa.Text(), "sqlite")
DIGEST_TYPE = sa.CHAR(41).with_variant(sa.Text(), "sqlite")
PEER_ID_TYPE = sa.CHAR(41).with_variant(sa.Text(), "sqlite")

TABLE_KWARGS = {"mysql_engine": "InnoDB"}
