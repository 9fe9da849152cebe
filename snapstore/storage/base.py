# snapstore/storage/base.py
"""
SnapStore 核心接口 - 快照存储 (ISnapshotStore)
定义了项目快照持久化所需的标准接口：只追加，按项目 ID 分组，最新的在前。
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import Snapshot


class ISnapshotStore(ABC):
    @abstractmethod
    def list_snapshots(self, project_id: str) -> List[Snapshot]:
        """Return every snapshot of the project, newest first."""
        pass

    @abstractmethod
    def append_snapshot(
        self,
        project_id: str,
        full_text: str,
        expected_head_id: Optional[str] = None,
    ) -> Snapshot:
        """
        Persist a new snapshot and return it.

        When ``expected_head_id`` is given the append is rejected with
        StaleSnapshotError unless it equals the id of the current newest
        snapshot. Without it the write is last-write-wins.
        """
        raise NotImplementedError

    @abstractmethod
    def list_projects(self) -> List[str]:
        pass

    def latest_snapshot(self, project_id: str) -> Optional[Snapshot]:
        snapshots = self.list_snapshots(project_id)
        return snapshots[0] if snapshots else None
