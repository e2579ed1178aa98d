"""Tests for Store transactions, run lock, and backups."""

from pathlib import Path

import pytest

from profsplit.config.settings import ProfSettings
from profsplit.domain.errors import LockHeldError
from profsplit.infrastructure.store import Store


class TestStore:
    def test_paths(self, store: Store, store_root: Path) -> None:
        assert store.root == store_root
        assert store.db_path == store_root / ".profsplit" / "profsplit.db"

    def test_plugins_not_loaded_by_default(self, store: Store) -> None:
        assert store.plugins is None

    def test_init_plugins(self, store: Store) -> None:
        store.init_plugins()
        assert store.plugins is not None
        assert store.plugins.is_loaded


class TestTransaction:
    def test_commits(self, store: Store) -> None:
        with store.transaction() as txn:
            pid = txn.profiles.create("customer", {"address_line1": "1 Main St"})
        with store.transaction() as txn:
            assert txn.profiles.get(pid) is not None

    def test_rolls_back_on_error(self, store: Store) -> None:
        with pytest.raises(RuntimeError), store.transaction() as txn:
            txn.profiles.create("customer")
            raise RuntimeError("boom")
        with store.transaction() as txn:
            assert txn.profiles.count() == 0

    def test_commit_false_sees_own_writes_then_discards(self, store: Store) -> None:
        with store.transaction(commit=False) as txn:
            txn.profiles.create("customer")
            assert txn.profiles.count() == 1
        with store.transaction() as txn:
            assert txn.profiles.count() == 0

    def test_savepoint_isolates_inner_failure(self, store: Store) -> None:
        with store.transaction() as txn:
            kept = txn.profiles.create("customer")
            with pytest.raises(RuntimeError), txn.conn.begin_nested():
                txn.profiles.create("customer")
                raise RuntimeError("inner")
        with store.transaction() as txn:
            assert txn.profiles.count() == 1
            assert txn.profiles.get(kept) is not None

    def test_invalidates_graph(self, store: Store) -> None:
        assert store.graph.shared_identities() == []
        with store.transaction() as txn:
            pid = txn.profiles.create("customer")
            oid = txn.orders.create("default", pid)
            txn.orders.add_shipment(oid, pid)
        assert store.graph.shared_identities() == [pid]


class TestRunLock:
    def test_acquire_and_release(self, store: Store) -> None:
        with store.run_lock("test") as holder:
            assert holder.endswith(":test")
            status = store.lock_status()
            assert status is not None
            assert status["holder"] == holder
        assert store.lock_status() is None

    def test_held_lock_raises(self, store: Store) -> None:
        with store.run_lock(), pytest.raises(LockHeldError) as exc_info, store.run_lock():
            pass
        assert exc_info.value.name == "profile-migration"
        assert exc_info.value.holder is not None

    def test_released_on_error(self, store: Store) -> None:
        with pytest.raises(RuntimeError), store.run_lock():
            raise RuntimeError("boom")
        assert store.lock_status() is None

    def test_break_lock(self, store: Store) -> None:
        assert store.break_lock() is False
        with store.run_lock():
            assert store.break_lock() is True
            assert store.lock_status() is None


class TestBackup:
    def test_creates_copy(self, store: Store) -> None:
        path = store.backup()
        assert path.exists()
        assert path.parent == store.root / ".profsplit" / "backups"

    def test_prunes_to_max_count(self, store_root: Path) -> None:
        settings = ProfSettings.from_cli(store_root=store_root)
        settings = settings.model_copy(
            update={"backup": settings.backup.model_copy(update={"max_count": 2})}
        )
        s = Store(settings)
        try:
            for _ in range(4):
                s.backup()
            assert len(list((store_root / ".profsplit" / "backups").glob("*.db"))) == 2
        finally:
            s.close()
