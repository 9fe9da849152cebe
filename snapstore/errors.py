# snapstore/errors.py
"""SnapStore 异常定义"""

from typing import Optional


class SnapshotStoreError(Exception):
    """Base error for snapshot persistence failures."""


class StaleSnapshotError(SnapshotStoreError):
    """Raised when an append was based on a head that is no longer current."""

    def __init__(self, project_id: str, expected_head_id: Optional[str], actual_head_id: Optional[str]):
        self.project_id = project_id
        self.expected_head_id = expected_head_id
        self.actual_head_id = actual_head_id
        super().__init__(
            f"Project '{project_id}' head is '{actual_head_id}', "
            f"but the write was based on '{expected_head_id}'"
        )
