# mdxforge/core/history.py
"""
VersionHistory: 只追加的快照序列（最新在前）+ 当前查看位置。
"""

from typing import Iterable, Iterator, List, Optional

from .models import Snapshot


class VersionHistory:
    def __init__(self, snapshots: Optional[Iterable[Snapshot]] = None, max_length: Optional[int] = None):
        if max_length is not None and max_length < 1:
            raise ValueError("max_length must be >= 1")
        self.max_length = max_length
        self._snapshots: List[Snapshot] = list(snapshots or [])
        self._trim()
        self.current_index = 0

    @classmethod
    def from_snapshots(cls, snapshots: Iterable[Snapshot], max_length: Optional[int] = None) -> 'VersionHistory':
        """从存储结果（最新在前）构建"""
        return cls(snapshots, max_length=max_length)

    def _trim(self):
        if self.max_length is not None:
            del self._snapshots[self.max_length:]

    def append(self, snapshot: Snapshot) -> None:
        self._snapshots.insert(0, snapshot)
        self._trim()
        self.current_index = 0

    def revert(self, index: int) -> Snapshot:
        """
        Point the history at ``index`` and return that snapshot.

        This is a view change only: no snapshot is created. Saving the
        returned content through the normal save path makes it the latest.
        """
        if not 0 <= index < len(self._snapshots):
            raise IndexError(f"Version index {index} out of range (0..{len(self._snapshots) - 1})")
        self.current_index = index
        return self._snapshots[index]

    @property
    def current(self) -> Optional[Snapshot]:
        if not self._snapshots:
            return None
        return self._snapshots[self.current_index]

    @property
    def latest(self) -> Optional[Snapshot]:
        return self._snapshots[0] if self._snapshots else None

    @property
    def is_viewing_latest(self) -> bool:
        return self.current_index == 0

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(list(self._snapshots))

    def __getitem__(self, index: int) -> Snapshot:
        return self._snapshots[index]
