"""Recon Store — SQL schema, engine helpers, and CollectionStore.

This package owns the engine's only shared resource: named address
collections, their memberships, and the audit trail of comparisons.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recon.store.collection_store import CollectionStore


def build_collection_store(db_path: str | Path | None = None) -> "CollectionStore":
    """Factory: return a ``CollectionStore`` honouring recon settings.

    When *db_path* is ``None``, the store resolves its database from
    ``get_settings().storage`` (``db_url`` first, then ``sqlite_path``).

    Args:
        db_path: Optional override for the SQLite file path.

    Returns:
        A configured :class:`CollectionStore` instance.
    """
    from recon.store.collection_store import CollectionStore

    return CollectionStore(db_path=db_path)
