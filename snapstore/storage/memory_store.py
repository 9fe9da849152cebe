# snapstore/storage/memory_store.py
import threading
from typing import Dict, List, Optional

from .base import ISnapshotStore
from ..errors import StaleSnapshotError
from ..models import Snapshot


class InMemorySnapshotStore(ISnapshotStore):
    """进程内快照存储，主要用于测试和无持久化的场景。"""

    def __init__(self):
        self._snapshots: Dict[str, List[Snapshot]] = {}
        self._lock = threading.RLock()

    def list_snapshots(self, project_id: str) -> List[Snapshot]:
        with self._lock:
            # stored oldest first
            return list(reversed(self._snapshots.get(project_id, [])))

    def append_snapshot(
        self,
        project_id: str,
        full_text: str,
        expected_head_id: Optional[str] = None,
    ) -> Snapshot:
        with self._lock:
            existing = self._snapshots.setdefault(project_id, [])
            if expected_head_id is not None:
                head_id = existing[-1].id if existing else None
                if head_id != expected_head_id:
                    raise StaleSnapshotError(project_id, expected_head_id, head_id)
            snapshot = Snapshot.create(full_text)
            existing.append(snapshot)
            return snapshot

    def list_projects(self) -> List[str]:
        with self._lock:
            return sorted(self._snapshots.keys())
