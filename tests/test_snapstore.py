# tests/test_snapstore.py
"""
SnapStore 库单元测试
测试 Snapshot 模型、内存存储与文件存储 (FileSnapshotStore)。
"""

import json
import tempfile
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from snapstore import (
    FileSnapshotStore,
    InMemorySnapshotStore,
    Snapshot,
    SnapshotStoreError,
    StaleSnapshotError,
    open_store,
)
from snapstore.storage.file_lock import FileLock
from snapstore.models import text_checksum

# --- Fixtures ---

@pytest.fixture
def temp_dir():
    """提供一个临时目录用于测试文件快照存储。"""
    with tempfile.TemporaryDirectory() as tmpdirname:
        yield Path(tmpdirname)


@pytest.fixture(params=["memory", "file"])
def store(request, temp_dir):
    if request.param == "memory":
        return InMemorySnapshotStore()
    return FileSnapshotStore(base_dir=str(temp_dir / "store"))

# --- Snapshot ---

def test_snapshot_create():
    snapshot = Snapshot.create("# a.mdx\n\nA")
    assert snapshot.id.startswith("snap_")
    assert snapshot.checksum == text_checksum("# a.mdx\n\nA")
    assert snapshot.created_at.endswith("+00:00")


def test_snapshot_dict_round_trip():
    snapshot = Snapshot.create("text")
    assert Snapshot.from_dict(snapshot.to_dict()) == snapshot


def test_snapshot_from_dict_fills_missing_checksum():
    snapshot = Snapshot.from_dict({"id": "snap_1", "full_text": "x", "created_at": "2024-01-01T00:00:00+00:00"})
    assert snapshot.checksum == text_checksum("x")

# --- 存储接口（内存与文件两种实现） ---

def test_empty_project(store):
    assert store.list_snapshots("docs") == []
    assert store.latest_snapshot("docs") is None


def test_snapshots_are_listed_newest_first(store):
    first = store.append_snapshot("docs", "v1")
    second = store.append_snapshot("docs", "v2")

    assert [s.id for s in store.list_snapshots("docs")] == [second.id, first.id]
    assert store.latest_snapshot("docs") == second


def test_projects_are_isolated(store):
    store.append_snapshot("alpha", "A")
    store.append_snapshot("beta", "B")

    assert [s.full_text for s in store.list_snapshots("alpha")] == ["A"]
    assert store.list_projects() == ["alpha", "beta"]


def test_append_with_current_head_succeeds(store):
    first = store.append_snapshot("docs", "v1")
    second = store.append_snapshot("docs", "v2", expected_head_id=first.id)
    assert store.latest_snapshot("docs") == second


def test_append_with_stale_head_is_rejected(store):
    first = store.append_snapshot("docs", "v1")
    store.append_snapshot("docs", "v2")

    with pytest.raises(StaleSnapshotError) as exc_info:
        store.append_snapshot("docs", "v3", expected_head_id=first.id)

    assert exc_info.value.expected_head_id == first.id
    assert len(store.list_snapshots("docs")) == 2

# --- 文件存储特有行为 ---

def test_file_store_survives_reopen(temp_dir):
    base_dir = str(temp_dir / "store")
    snapshot = FileSnapshotStore(base_dir=base_dir).append_snapshot("docs", "# a.mdx\n\nA")

    reopened = open_store(base_dir)

    assert reopened.list_snapshots("docs") == [snapshot]
    assert reopened.get_project_info("docs")["head_id"] == snapshot.id


def test_file_store_layout(temp_dir):
    store = FileSnapshotStore(base_dir=str(temp_dir / "store"))
    store.append_snapshot("docs", "v1")
    store.append_snapshot("docs", "v2")

    lines = (temp_dir / "store" / "projects" / "docs" / "snapshots.ndjson").read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["full_text"] for line in lines] == ["v1", "v2"]
    assert not list((temp_dir / "store" / "projects" / "docs").glob("*.tmp"))


@pytest.mark.parametrize("project_id", ["", "../escape", "a/b", ".hidden"])
def test_file_store_rejects_unsafe_project_ids(temp_dir, project_id):
    store = FileSnapshotStore(base_dir=str(temp_dir / "store"))
    with pytest.raises(SnapshotStoreError):
        store.append_snapshot(project_id, "x")


def test_file_store_reports_corrupted_records(temp_dir):
    store = FileSnapshotStore(base_dir=str(temp_dir / "store"))
    store.append_snapshot("docs", "v1")
    snapshots_file = temp_dir / "store" / "projects" / "docs" / "snapshots.ndjson"
    with snapshots_file.open("a", encoding="utf-8") as f:
        f.write("{not json\n")

    with pytest.raises(SnapshotStoreError):
        store.list_snapshots("docs")


def test_file_lock_can_be_reacquired(temp_dir):
    lock_path = str(temp_dir / "test.lock")
    with FileLock(lock_path):
        assert Path(lock_path).exists()
    with FileLock(lock_path):
        pass


def test_file_lock_times_out_while_held(temp_dir):
    lock_path = str(temp_dir / "busy.lock")
    with FileLock(lock_path) as held:
        assert held.is_locked
        with pytest.raises(SnapshotStoreError):
            with FileLock(lock_path, timeout=0.1):
                pass
    assert not held.is_locked


def test_file_store_concurrent_appends_to_different_projects(temp_dir):
    base_dir = str(temp_dir / "store")
    projects = ["alpha", "beta", "gamma"]
    appends = 50
    errors = []

    def writer(project_id):
        store = FileSnapshotStore(base_dir=base_dir)
        for index in range(appends):
            try:
                store.append_snapshot(project_id, f"{project_id} v{index}")
            except Exception as e:
                errors.append(e)

    threads = [threading.Thread(target=writer, args=(project_id,)) for project_id in projects]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    reopened = FileSnapshotStore(base_dir=base_dir)
    for project_id in projects:
        assert len(reopened.list_snapshots(project_id)) == appends
        info = reopened.get_project_info(project_id)
        assert info["count"] == appends
        assert info["head_id"] == reopened.latest_snapshot(project_id).id
    assert not list((temp_dir / "store" / ".indexes").glob("*.tmp"))


def test_file_store_index_failure_keeps_snapshot(temp_dir, caplog):
    store = FileSnapshotStore(base_dir=str(temp_dir / "store"))

    with patch.object(FileSnapshotStore, "_persist_index", side_effect=OSError("disk full")):
        snapshot = store.append_snapshot("docs", "v1")

    assert store.list_snapshots("docs") == [snapshot]
    assert "project index not updated" in caplog.text
