"""
SnapStore 库 - 按项目保存只追加的文档快照历史。
"""

from .errors import SnapshotStoreError, StaleSnapshotError
from .models import Snapshot
from .storage.base import ISnapshotStore
from .storage.file_snapshot_store import FileSnapshotStore
from .storage.memory_store import InMemorySnapshotStore


def open_store(storage_dir: str = ".mdxforge/store") -> FileSnapshotStore:
    """打开（必要时创建）文件快照存储"""
    return FileSnapshotStore(base_dir=storage_dir)


__all__ = [
    'Snapshot', 'ISnapshotStore', 'FileSnapshotStore', 'InMemorySnapshotStore',
    'SnapshotStoreError', 'StaleSnapshotError', 'open_store',
]
