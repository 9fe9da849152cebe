# snapstore/storage/file_lock.py
"""
快照文件的进程间互斥锁。

Each project gets its own lock file under ``<base_dir>/.locks``. Readers
take the same exclusive lock as writers, so a reader never sees a
snapshot file in the middle of being replaced.
"""

import sys
import time
from pathlib import Path
from typing import Optional

from ..errors import SnapshotStoreError

if sys.platform == "win32":
    import msvcrt
else:
    import fcntl

DEFAULT_TIMEOUT = 30.0
POLL_INTERVAL = 0.05


def _try_lock(fileno: int) -> bool:
    try:
        if sys.platform == "win32":
            msvcrt.locking(fileno, msvcrt.LK_NBLCK, 1)
        else:
            fcntl.flock(fileno, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except (BlockingIOError, PermissionError):
        return False
    return True


def _unlock(fileno: int) -> None:
    if sys.platform == "win32":
        msvcrt.locking(fileno, msvcrt.LK_UNLCK, 1)
    else:
        fcntl.flock(fileno, fcntl.LOCK_UN)


class FileLock:
    """
    Exclusive lock on ``lock_file_path``, held for the duration of a ``with`` block.

    Acquisition polls until ``timeout`` seconds have passed (``None`` waits
    forever) and then raises SnapshotStoreError.
    """

    def __init__(self, lock_file_path: str, timeout: Optional[float] = DEFAULT_TIMEOUT):
        self.lock_file_path = Path(lock_file_path)
        self.timeout = timeout
        self._lock_file = None

    @property
    def is_locked(self) -> bool:
        return self._lock_file is not None

    def __enter__(self):
        self.lock_file_path.parent.mkdir(parents=True, exist_ok=True)
        deadline = None if self.timeout is None else time.monotonic() + self.timeout

        try:
            lock_file = open(self.lock_file_path, "a")
        except OSError as e:
            raise SnapshotStoreError(f"Cannot open lock file {self.lock_file_path}: {e}") from e

        try:
            while not _try_lock(lock_file.fileno()):
                if deadline is not None and time.monotonic() >= deadline:
                    raise SnapshotStoreError(
                        f"Timed out after {self.timeout}s waiting for {self.lock_file_path}"
                    )
                time.sleep(POLL_INTERVAL)
        except BaseException:
            lock_file.close()
            raise

        self._lock_file = lock_file
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._lock_file is None:
            return
        try:
            _unlock(self._lock_file.fileno())
        finally:
            self._lock_file.close()
            self._lock_file = None
