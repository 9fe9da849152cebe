# snapstore/storage/file_snapshot_store.py
"""
SnapStore 核心实现 - 文件快照存储 (FileSnapshotStore)

目录结构:
    <base_dir>/projects/<project_id>/snapshots.ndjson   每行一个快照，按时间正序
    <base_dir>/.locks/<project_id>.lock
    <base_dir>/.locks/_index.lock                       所有项目共享的索引锁
    <base_dir>/.indexes/project_index.json
"""

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from .base import ISnapshotStore
from .file_lock import DEFAULT_TIMEOUT, FileLock
from ..errors import SnapshotStoreError, StaleSnapshotError
from ..models import Snapshot

logger = logging.getLogger(__name__)

_SAFE_PROJECT_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
# 项目 ID 必须以字母或数字开头，因此不会与项目锁文件重名
INDEX_LOCK_NAME = "_index.lock"


class FileSnapshotStore(ISnapshotStore):
    def __init__(self, base_dir: str = ".mdxforge/store", lock_timeout: Optional[float] = DEFAULT_TIMEOUT):
        self.base_dir = Path(base_dir).resolve()
        self.lock_timeout = lock_timeout
        self.projects_dir = self.base_dir / "projects"
        self.locks_dir = self.base_dir / ".locks"
        self.indexes_dir = self.base_dir / ".indexes"

        for dir_path in [self.projects_dir, self.locks_dir, self.indexes_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)

        self._project_index = self._load_index("project_index.json")

    def _load_index(self, filename: str) -> Dict:
        index_file = self.indexes_dir / filename
        if index_file.exists():
            try:
                return json.loads(index_file.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                raise SnapshotStoreError(f"Corrupted index {index_file}: {e}") from e
        return {}

    def _persist_index(self):
        index_file = self.indexes_dir / "project_index.json"
        # 每个写入者使用独立的临时文件
        fd, temp_name = tempfile.mkstemp(dir=str(self.indexes_dir), prefix="project_index.", suffix=".tmp")
        temp_file = Path(temp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(json.dumps(self._project_index, indent=2))
            temp_file.replace(index_file)
        except OSError:
            temp_file.unlink(missing_ok=True)
            raise

    def _update_index(self, project_id: str, entry: Dict) -> None:
        """Record ``entry`` for ``project_id`` under the store-wide index lock."""
        with FileLock(str(self.locks_dir / INDEX_LOCK_NAME), timeout=self.lock_timeout):
            # 其他进程可能已更新索引
            self._project_index = self._load_index("project_index.json")
            self._project_index[project_id] = entry
            self._persist_index()

    def _project_dir(self, project_id: str) -> Path:
        if not _SAFE_PROJECT_ID.match(project_id or ""):
            raise SnapshotStoreError(f"Invalid project id: {project_id!r}")
        return self.projects_dir / project_id

    def _snapshots_file(self, project_id: str) -> Path:
        return self._project_dir(project_id) / "snapshots.ndjson"

    def _lock(self, project_id: str) -> FileLock:
        lock_path = self.locks_dir / f"{self._project_dir(project_id).name}.lock"
        return FileLock(str(lock_path), timeout=self.lock_timeout)

    def _read_chronological(self, project_id: str) -> List[Snapshot]:
        snapshots_file = self._snapshots_file(project_id)
        snapshots = []
        if not snapshots_file.exists():
            return snapshots
        with snapshots_file.open(encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    snapshots.append(Snapshot.from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError) as e:
                    raise SnapshotStoreError(
                        f"Corrupted snapshot record {snapshots_file}:{line_no}: {e}"
                    ) from e
        return snapshots

    def list_snapshots(self, project_id: str) -> List[Snapshot]:
        with self._lock(project_id):
            snapshots = self._read_chronological(project_id)
        snapshots.reverse()
        return snapshots

    def append_snapshot(
        self,
        project_id: str,
        full_text: str,
        expected_head_id: Optional[str] = None,
    ) -> Snapshot:
        with self._lock(project_id):
            existing = self._read_chronological(project_id)
            if expected_head_id is not None:
                head_id = existing[-1].id if existing else None
                if head_id != expected_head_id:
                    raise StaleSnapshotError(project_id, expected_head_id, head_id)

            snapshot = Snapshot.create(full_text)
            snapshots_file = self._snapshots_file(project_id)
            snapshots_file.parent.mkdir(parents=True, exist_ok=True)

            # 重写到临时文件后原子替换，避免半行记录
            temp_file = snapshots_file.with_suffix(".ndjson.tmp")
            try:
                with open(temp_file, "w", encoding="utf-8") as f:
                    for record in existing + [snapshot]:
                        f.write(json.dumps(record.to_dict(), ensure_ascii=False) + "\n")
                temp_file.replace(snapshots_file)
            except OSError as e:
                temp_file.unlink(missing_ok=True)
                raise SnapshotStoreError(f"Failed to write snapshot for '{project_id}': {e}") from e

            # 快照已落盘；索引只是缓存，失败不影响本次写入
            try:
                self._update_index(project_id, {
                    "head_id": snapshot.id,
                    "count": len(existing) + 1,
                    "updated_at": snapshot.created_at,
                })
            except (OSError, SnapshotStoreError) as e:
                logger.warning("Snapshot %s stored but project index not updated: %s", snapshot.id, e)
            return snapshot

    def list_projects(self) -> List[str]:
        on_disk = {p.name for p in self.projects_dir.iterdir() if p.is_dir()}
        return sorted(on_disk | set(self._project_index.keys()))

    def get_project_info(self, project_id: str) -> Optional[Dict]:
        """获取项目索引信息（最新快照 ID、数量、更新时间）"""
        return self._project_index.get(project_id)
