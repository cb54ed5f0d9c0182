"""Persistence for address collections and the comparison audit trail.

``CollectionStore`` accepts an optional *db_path* for convenience or a
pre-built *session_factory* for shared engines and test fixtures. Each
public method runs in its own session and commits once, so every logical
mutation is a single transaction.

Addresses are stored lowercase; callers are expected to validate format
before insertion.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from recon.exceptions import DuplicateCollectionError
from recon.store import sql as sql_schema
from recon.store.sql import (
    METADATA,
    build_session_factory,
    dialect_insert,
)

logger = logging.getLogger(__name__)


class CollectionStore:
    """Persist collections, their member addresses, and comparison audits.

    Args:
        db_path: Convenience path for a local SQLite file.  Mutually
            exclusive with *session_factory*.
        session_factory: Pre-configured ``sessionmaker``.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        *,
        session_factory: sessionmaker | None = None,
    ) -> None:
        if session_factory is not None:
            self._session_factory = session_factory
        elif db_path is not None:
            self._session_factory = build_session_factory(db_path=db_path)
        else:
            self._session_factory = build_session_factory()

        # Ensure schema exists (auto-create for SQLite / local dev)
        with self._session_factory() as session:
            METADATA.create_all(session.connection())
            session.commit()

    # ------------------------------------------------------------------
    # collections
    # ------------------------------------------------------------------

    def create_collection(self, *, name: str, description: str | None = None) -> dict[str, Any]:
        """Insert a collection and return its row.

        Raises:
            DuplicateCollectionError: If *name* is already taken.
        """
        now = datetime.now(timezone.utc)
        with self._session_factory() as session:
            try:
                result = session.execute(
                    sa.insert(sql_schema.collections).values(
                        name=name,
                        description=description,
                        created_at=now,
                    )
                )
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateCollectionError(name) from exc
            collection_id = result.inserted_primary_key[0]
        logger.info("Created collection %s (%r)", collection_id, name)
        return {"id": collection_id, "name": name, "description": description, "created_at": now}

    def get_collection(self, collection_id: int) -> dict[str, Any] | None:
        """Return a single collection row as a dict, or ``None``."""
        with self._session_factory() as session:
            row = session.execute(
                sa.select(sql_schema.collections).where(sql_schema.collections.c.id == collection_id)
            ).first()
        return dict(row._mapping) if row else None

    def list_collections(self) -> list[dict[str, Any]]:
        """Return all collections, newest first, each with an ``address_count``."""
        c = sql_schema.collections
        ca = sql_schema.collection_addresses
        counts = (
            sa.select(ca.c.collection_id, sa.func.count().label("address_count"))
            .group_by(ca.c.collection_id)
            .subquery()
        )
        stmt = (
            sa.select(c, sa.func.coalesce(counts.c.address_count, 0).label("address_count"))
            .select_from(c.outerjoin(counts, counts.c.collection_id == c.c.id))
            .order_by(c.c.created_at.desc(), c.c.id.desc())
        )
        with self._session_factory() as session:
            rows = session.execute(stmt).all()
        return [dict(r._mapping) for r in rows]

    def delete_collection(self, collection_id: int) -> bool:
        """Delete a collection and all of its memberships.

        Audit rows that referenced the collection keep their history with
        ``collection_id`` cleared.

        Returns:
            ``True`` if a collection was deleted.
        """
        with self._session_factory() as session:
            session.execute(
                sa.delete(sql_schema.collection_addresses).where(
                    sql_schema.collection_addresses.c.collection_id == collection_id
                )
            )
            session.execute(
                sa.update(sql_schema.comparisons)
                .where(sql_schema.comparisons.c.collection_id == collection_id)
                .values(collection_id=None)
            )
            result = session.execute(
                sa.delete(sql_schema.collections).where(sql_schema.collections.c.id == collection_id)
            )
            deleted = result.rowcount > 0
            session.commit()
        if deleted:
            logger.info("Deleted collection %s", collection_id)
        return deleted

    # ------------------------------------------------------------------
    # collection_addresses
    # ------------------------------------------------------------------

    def add_addresses(self, collection_id: int, addresses: Iterable[str]) -> int:
        """Insert addresses not already in the collection.

        Duplicates (within *addresses* or against existing members) are
        ignored, so repeated calls never inflate the member count.

        Returns:
            Number of newly inserted members.
        """
        ca = sql_schema.collection_addresses
        wanted = list(dict.fromkeys(a.lower() for a in addresses))
        if not wanted:
            return 0

        with self._session_factory() as session:
            existing = set(
                session.execute(sa.select(ca.c.address).where(ca.c.collection_id == collection_id)).scalars()
            )
            new = [a for a in wanted if a not in existing]
            if not new:
                return 0
            now = datetime.now(timezone.utc)
            stmt = dialect_insert(session, ca).on_conflict_do_nothing(
                index_elements=["collection_id", "address"],
            )
            session.execute(
                stmt,
                [{"collection_id": collection_id, "address": a, "created_at": now} for a in new],
            )
            session.commit()
        logger.debug("Added %d address(es) to collection %s", len(new), collection_id)
        return len(new)

    def remove_address(self, collection_id: int, address: str) -> bool:
        """Remove *address* from the collection; absent members are not an error.

        Returns:
            ``True`` if a membership row was deleted.
        """
        ca = sql_schema.collection_addresses
        with self._session_factory() as session:
            result = session.execute(
                sa.delete(ca).where(ca.c.collection_id == collection_id, ca.c.address == address.lower())
            )
            removed = result.rowcount > 0
            session.commit()
        return removed

    def list_addresses(self, collection_id: int) -> list[str]:
        """Return every member address of the collection, in insertion order."""
        ca = sql_schema.collection_addresses
        with self._session_factory() as session:
            rows = session.execute(
                sa.select(ca.c.address).where(ca.c.collection_id == collection_id).order_by(ca.c.id)
            ).scalars()
            return list(rows)

    def count_addresses(self, collection_id: int) -> int:
        """Return the number of members in the collection."""
        ca = sql_schema.collection_addresses
        with self._session_factory() as session:
            return session.execute(
                sa.select(sa.func.count()).select_from(ca).where(ca.c.collection_id == collection_id)
            ).scalar_one()

    # ------------------------------------------------------------------
    # comparisons
    # ------------------------------------------------------------------

    def record_comparison(
        self,
        *,
        minted_file_name: str,
        eligible_file_name: str,
        total_eligible: int,
        total_minted: int,
        remaining: int,
        results: dict[str, Any],
        invalid_addresses: int | None = None,
        collection_id: int | None = None,
    ) -> int:
        """Insert an audit row for a reconciliation and return its id."""
        with self._session_factory() as session:
            result = session.execute(
                sa.insert(sql_schema.comparisons).values(
                    created_at=datetime.now(timezone.utc),
                    collection_id=collection_id,
                    minted_file_name=minted_file_name,
                    eligible_file_name=eligible_file_name,
                    total_eligible=total_eligible,
                    total_minted=total_minted,
                    remaining=remaining,
                    invalid_addresses=invalid_addresses,
                    results=results,
                )
            )
            session.commit()
            comparison_id = result.inserted_primary_key[0]
        logger.info(
            "Recorded comparison %s: %s vs %s, %d remaining",
            comparison_id,
            eligible_file_name,
            minted_file_name,
            remaining,
        )
        return comparison_id

    def list_comparisons(self, *, limit: int = 50) -> list[dict[str, Any]]:
        """Return the most recent comparison audits, newest first."""
        c = sql_schema.comparisons
        stmt = sa.select(c).order_by(c.c.created_at.desc(), c.c.id.desc()).limit(limit)
        with self._session_factory() as session:
            rows = session.execute(stmt).all()
        return [dict(r._mapping) for r in rows]

    def get_comparison(self, comparison_id: int) -> dict[str, Any] | None:
        """Return a single comparison audit as a dict, or ``None``."""
        with self._session_factory() as session:
            row = session.execute(
                sa.select(sql_schema.comparisons).where(sql_schema.comparisons.c.id == comparison_id)
            ).first()
        return dict(row._mapping) if row else None
