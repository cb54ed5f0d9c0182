"""Unit tests for CollectionStore CRUD and the comparison audit table."""

from __future__ import annotations

from pathlib import Path

import pytest

from recon.exceptions import DuplicateCollectionError
from recon.store.collection_store import CollectionStore

ADDR_A = "0x" + "a" * 39 + "1"
ADDR_B = "0x" + "b" * 39 + "2"


class TestCollections:
    def test_create_and_get(self, collection_store: CollectionStore) -> None:
        row = collection_store.create_collection(name="Genesis", description="first drop")
        fetched = collection_store.get_collection(row["id"])
        assert fetched is not None
        assert fetched["name"] == "Genesis"
        assert fetched["description"] == "first drop"
        assert fetched["created_at"] is not None

    def test_get_missing_returns_none(self, collection_store: CollectionStore) -> None:
        assert collection_store.get_collection(404) is None

    def test_duplicate_name_raises(self, collection_store: CollectionStore) -> None:
        collection_store.create_collection(name="Genesis")
        with pytest.raises(DuplicateCollectionError):
            collection_store.create_collection(name="Genesis")

    def test_names_are_case_sensitive(self, collection_store: CollectionStore) -> None:
        collection_store.create_collection(name="Genesis")
        collection_store.create_collection(name="genesis")
        assert len(collection_store.list_collections()) == 2

    def test_list_includes_counts(self, collection_store: CollectionStore) -> None:
        a = collection_store.create_collection(name="A")
        collection_store.create_collection(name="B")
        collection_store.add_addresses(a["id"], [ADDR_A, ADDR_B])
        counts = {row["name"]: row["address_count"] for row in collection_store.list_collections()}
        assert counts == {"A": 2, "B": 0}

    def test_delete_cascades_memberships(self, collection_store: CollectionStore) -> None:
        row = collection_store.create_collection(name="Gone")
        collection_store.add_addresses(row["id"], [ADDR_A])
        assert collection_store.delete_collection(row["id"]) is True
        assert collection_store.get_collection(row["id"]) is None
        assert collection_store.count_addresses(row["id"]) == 0

    def test_delete_missing(self, collection_store: CollectionStore) -> None:
        assert collection_store.delete_collection(12345) is False

    def test_delete_keeps_audit_history(self, collection_store: CollectionStore) -> None:
        row = collection_store.create_collection(name="Audited")
        comparison_id = collection_store.record_comparison(
            minted_file_name="Collection: Audited",
            eligible_file_name="e.txt",
            total_eligible=1,
            total_minted=0,
            remaining=1,
            results={"notMinted": []},
            collection_id=row["id"],
        )
        collection_store.delete_collection(row["id"])
        audit = collection_store.get_comparison(comparison_id)
        assert audit is not None
        assert audit["collection_id"] is None


class TestMembership:
    def test_add_is_idempotent(self, collection_store: CollectionStore) -> None:
        cid = collection_store.create_collection(name="C")["id"]
        assert collection_store.add_addresses(cid, [ADDR_A]) == 1
        assert collection_store.add_addresses(cid, [ADDR_A]) == 0
        assert collection_store.count_addresses(cid) == 1

    def test_add_dedupes_input_and_lowercases(self, collection_store: CollectionStore) -> None:
        cid = collection_store.create_collection(name="C")["id"]
        upper = ADDR_A.upper().replace("0X", "0x")
        assert collection_store.add_addresses(cid, [upper, ADDR_A, ADDR_B]) == 2
        assert collection_store.list_addresses(cid) == [ADDR_A, ADDR_B]

    def test_add_empty(self, collection_store: CollectionStore) -> None:
        cid = collection_store.create_collection(name="C")["id"]
        assert collection_store.add_addresses(cid, []) == 0

    def test_same_address_in_two_collections(self, collection_store: CollectionStore) -> None:
        one = collection_store.create_collection(name="one")["id"]
        two = collection_store.create_collection(name="two")["id"]
        collection_store.add_addresses(one, [ADDR_A])
        assert collection_store.add_addresses(two, [ADDR_A]) == 1

    def test_remove_is_idempotent(self, collection_store: CollectionStore) -> None:
        cid = collection_store.create_collection(name="C")["id"]
        collection_store.add_addresses(cid, [ADDR_A])
        assert collection_store.remove_address(cid, ADDR_A.upper().replace("0X", "0x")) is True
        assert collection_store.remove_address(cid, ADDR_A) is False
        assert collection_store.list_addresses(cid) == []


class TestComparisons:
    def test_list_newest_first_with_limit(self, collection_store: CollectionStore) -> None:
        ids = [
            collection_store.record_comparison(
                minted_file_name=f"m{i}",
                eligible_file_name=f"e{i}",
                total_eligible=i,
                total_minted=0,
                remaining=i,
                results={"i": i},
            )
            for i in range(3)
        ]
        rows = collection_store.list_comparisons(limit=2)
        assert [r["id"] for r in rows] == [ids[2], ids[1]]
        assert rows[0]["results"] == {"i": 2}

    def test_get_missing(self, collection_store: CollectionStore) -> None:
        assert collection_store.get_comparison(1) is None


class TestStoreFactory:
    def test_build_uses_settings_path(self, _isolated_database: Path) -> None:
        from recon.store import build_collection_store

        store = build_collection_store()
        store.create_collection(name="persisted")
        assert _isolated_database.exists()

    def test_shared_file_across_instances(self, tmp_path: Path) -> None:
        db = tmp_path / "shared.db"
        CollectionStore(db_path=db).create_collection(name="x")
        assert [r["name"] for r in CollectionStore(db_path=db).list_collections()] == ["x"]
