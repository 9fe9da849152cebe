# mdxforge/core/events.py
"""
ChangeEventBus: 项目快照变更通知。

The host wires this to whatever transport it has (websocket, pub/sub, a UI
refresh); the core only calls ``emit`` after a snapshot is stored.
"""

import threading
from typing import Callable, Dict, List

from .models import Snapshot
from ..utils.console import get_logger

logger = get_logger(__name__)

ChangeCallback = Callable[[str, Snapshot], None]


class ChangeEventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[ChangeCallback]] = {}
        self._lock = threading.RLock()

    def on_change(self, project_id: str, callback: ChangeCallback) -> Callable[[], None]:
        """Subscribe to new snapshots of ``project_id``; returns an unsubscribe function."""
        with self._lock:
            self._subscribers.setdefault(project_id, []).append(callback)

        def unsubscribe():
            with self._lock:
                callbacks = self._subscribers.get(project_id, [])
                if callback in callbacks:
                    callbacks.remove(callback)
                if not callbacks:
                    self._subscribers.pop(project_id, None)

        return unsubscribe

    def emit(self, project_id: str, snapshot: Snapshot) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(project_id, []))
        for callback in callbacks:
            try:
                callback(project_id, snapshot)
            except Exception:
                # 订阅者异常不影响已完成的保存
                logger.exception("Change subscriber failed for project '%s'", project_id)

    def subscriber_count(self, project_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(project_id, []))
