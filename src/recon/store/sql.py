"""SQLAlchemy table definitions for collections and comparison audits.

Three tables share one ``METADATA`` instance used by ``create_all``:

* ``collections`` — named address sets (name is unique).
* ``collection_addresses`` — membership rows, unique per (collection, address).
* ``comparisons`` — the audit trail of every reconciliation run.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import sqlalchemy as sa
from sqlalchemy import event
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Session, sessionmaker

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")
TIMESTAMP = sa.DateTime(timezone=True)

METADATA = sa.MetaData()

# ---------------------------------------------------------------------------
# collections: named, persistent address sets
# ---------------------------------------------------------------------------

collections = sa.Table(
    "collections",
    METADATA,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column("name", sa.Text(), nullable=False),
    sa.Column("description", sa.Text(), nullable=True),
    sa.Column("created_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    sa.UniqueConstraint("name", name="uq_collections_name"),
)

# ---------------------------------------------------------------------------
# collection_addresses: membership (lowercase addresses)
# ---------------------------------------------------------------------------

collection_addresses = sa.Table(
    "collection_addresses",
    METADATA,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column(
        "collection_id",
        sa.Integer(),
        sa.ForeignKey("collections.id", ondelete="CASCADE"),
        nullable=False,
    ),
    sa.Column("address", sa.Text(), nullable=False),
    sa.Column("created_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    sa.UniqueConstraint("collection_id", "address", name="uq_collection_addresses_member"),
)
sa.Index("idx_collection_addresses_collection_id", collection_addresses.c.collection_id)

# ---------------------------------------------------------------------------
# comparisons: reconciliation audit trail
# ---------------------------------------------------------------------------

comparisons = sa.Table(
    "comparisons",
    METADATA,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column("created_at", TIMESTAMP, nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    sa.Column(
        "collection_id",
        sa.Integer(),
        sa.ForeignKey("collections.id", ondelete="SET NULL"),
        nullable=True,
    ),
    sa.Column("minted_file_name", sa.Text(), nullable=False),
    sa.Column("eligible_file_name", sa.Text(), nullable=False),
    sa.Column("total_eligible", sa.Integer(), nullable=False),
    sa.Column("total_minted", sa.Integer(), nullable=False),
    sa.Column("remaining", sa.Integer(), nullable=False),
    sa.Column("invalid_addresses", sa.Integer(), nullable=True),
    sa.Column("results", JSON_TYPE, nullable=False),
)
sa.Index("idx_comparisons_created_at", comparisons.c.created_at)
sa.Index("idx_comparisons_collection_id", comparisons.c.collection_id)


# ---------------------------------------------------------------------------
# Engine / session helpers
# ---------------------------------------------------------------------------


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(*, db_path: str | Path | None = None, echo: bool | None = None) -> sa.Engine:
    """Create a SQLAlchemy engine for the recon database.

    Resolution order:

    - *db_path* argument — a local SQLite file.
    - ``settings.storage.db_url`` — any SQLAlchemy URL (e.g. PostgreSQL).
    - ``settings.storage.sqlite_path`` — the default local SQLite file.

    Args:
        db_path: Override path for the SQLite file.
        echo: When True, log all SQL statements. Defaults to
            ``settings.storage.echo``.
    """
    from recon.settings import get_settings

    storage = get_settings().storage
    if echo is None:
        echo = storage.echo

    if db_path is None and storage.db_url:
        engine = sa.create_engine(storage.db_url, echo=echo, pool_pre_ping=True)
    else:
        resolved = Path(db_path if db_path is not None else storage.sqlite_path)
        resolved.parent.mkdir(parents=True, exist_ok=True)
        engine = sa.create_engine(
            f"sqlite:///{resolved.as_posix()}",
            echo=echo,
            pool_pre_ping=True,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(*, db_path: str | Path | None = None) -> sessionmaker:
    """Return a ``sessionmaker`` bound to the recon engine."""
    engine = build_engine(db_path=db_path)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


def dialect_insert(session: Session, table: sa.Table) -> sa.Insert:
    """Return a dialect-aware INSERT that supports ``on_conflict_do_nothing``.

    Picks the correct dialect (SQLite or PostgreSQL) based on the session's
    bound engine.
    """
    bind = session.get_bind()
    dialect_name = bind.dialect.name
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    else:
        from sqlalchemy.dialects.sqlite import insert
    return insert(table)
