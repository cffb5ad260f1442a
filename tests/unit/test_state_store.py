"""Unit tests for BuildStateStore and the freshness predicate."""

from __future__ import annotations

from pathlib import Path

import pytest

from imagesmith.core.state_store import BuildStateStore, StoreError, is_newer_than_record
from imagesmith.models.candidates import BuildRecord, RepositoryKey


# ---------------------------------------------------------------------------
# Test: freshness predicate
# ---------------------------------------------------------------------------


class TestIsNewerThanRecord:
    def test_absent_record_is_newer(self, make_candidate):
        assert is_newer_than_record(None, make_candidate()) is True

    def test_same_commit_is_not_newer(self, make_candidate):
        record = BuildRecord(owner="a", name="b", commit_id="c1")
        assert is_newer_than_record(record, make_candidate(commit_id="c1")) is False

    def test_any_different_commit_is_newer(self, make_candidate):
        """Comparison is inequality, not ordering: an 'older' id still counts."""
        record = BuildRecord(owner="a", name="b", commit_id="zzz")
        assert is_newer_than_record(record, make_candidate(commit_id="aaa")) is True


# ---------------------------------------------------------------------------
# Test: store
# ---------------------------------------------------------------------------


class TestBuildStateStore:
    def test_ensure_exists_creates_parent_and_file(self, tmp_path: Path):
        db = tmp_path / "deep" / "nested" / "state.db"
        store = BuildStateStore(db)
        store.ensure_exists()
        assert db.exists()

    def test_ensure_exists_is_repeatable(self, store: BuildStateStore):
        store.ensure_exists()
        assert store.list_records() == []

    def test_unknown_repository_has_no_record(self, store: BuildStateStore):
        assert store.get_record(RepositoryKey(owner="a", name="b")) is None

    def test_no_record_means_newer(self, store: BuildStateStore, make_candidate):
        assert store.is_newer_than_stored(make_candidate()) is True

    def test_recorded_commit_is_not_newer(self, store: BuildStateStore, make_candidate):
        candidate = make_candidate(commit_id="c1")
        store.record_success(candidate.repository_key, "c1")
        assert store.is_newer_than_stored(candidate) is False

    def test_new_commit_after_record_is_newer(self, store: BuildStateStore, make_candidate):
        store.record_success(RepositoryKey(owner="a", name="b"), "c1")
        assert store.is_newer_than_stored(make_candidate(commit_id="c2")) is True

    def test_record_overwrites_previous_commit(self, store: BuildStateStore):
        key = RepositoryKey(owner="a", name="b")
        store.record_success(key, "c1")
        store.record_success(key, "c2")

        record = store.get_record(key)
        assert record is not None
        assert record.commit_id == "c2"
        assert len(store.list_records()) == 1

    def test_record_success_is_idempotent(self, store: BuildStateStore):
        key = RepositoryKey(owner="a", name="b")
        first = store.record_success(key, "c1")
        second = store.record_success(key, "c1")

        assert second == first
        assert store.list_records() == [first]

    def test_records_are_per_repository(self, store: BuildStateStore, make_candidate):
        store.record_success(RepositoryKey(owner="a", name="b"), "c1")
        assert store.is_newer_than_stored(make_candidate(owner="a", name="other", commit_id="c1"))
        assert store.is_newer_than_stored(make_candidate(owner="x", name="b", commit_id="c1"))

    def test_records_survive_reopen(self, tmp_path: Path):
        db = tmp_path / "state.db"
        first = BuildStateStore(db)
        first.ensure_exists()
        first.record_success(RepositoryKey(owner="a", name="b"), "c1")

        reopened = BuildStateStore(db)
        record = reopened.get_record(RepositoryKey(owner="a", name="b"))
        assert record is not None
        assert record.commit_id == "c1"

    def test_list_records_sorted(self, store: BuildStateStore):
        store.record_success(RepositoryKey(owner="z", name="b"), "1")
        store.record_success(RepositoryKey(owner="a", name="c"), "2")
        store.record_success(RepositoryKey(owner="a", name="b"), "3")
        assert [(r.owner, r.name) for r in store.list_records()] == [
            ("a", "b"),
            ("a", "c"),
            ("z", "b"),
        ]

    def test_uninitialized_store_raises_store_error(self, tmp_path: Path):
        store = BuildStateStore(tmp_path / "missing.db")
        with pytest.raises(StoreError):
            store.get_record(RepositoryKey(owner="a", name="b"))

    def test_unwritable_location_raises_store_error(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        store = BuildStateStore(blocker / "state.db")
        with pytest.raises(StoreError):
            store.ensure_exists()
