from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Optional

# a lock file without a readable PID this old is left over from a crash
EMPTY_LOCK_GRACE_SECONDS = 30


class LockBusyError(RuntimeError):
    """Raised when another regeneration already holds the catalog lock."""

    def __init__(self, path: str, pid: Optional[int] = None) -> None:
        self.path = path
        self.pid = pid
        message = f"Catalog regeneration already running ({path})"
        if pid is not None:
            message = f"{message} (PID {pid})"
        super().__init__(message)


def _is_process_running(pid: int) -> bool:
    if pid <= 0:
        return False

    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    else:
        return True


@dataclass
class RegenerationLock:
    """Single-flight guard around backup-then-write of a catalog file."""

    path: str
    acquired: bool = False

    def acquire(self) -> None:
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)

        existing_pid = self._read_pid()
        if existing_pid is not None:
            if not _is_process_running(existing_pid):
                # stale lock left by a crashed run
                self._unlink()
        elif self._age() > EMPTY_LOCK_GRACE_SECONDS:
            self._unlink()

        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            raise LockBusyError(self.path, self._read_pid()) from None
        with os.fdopen(fd, "w") as fh:
            fh.write(str(os.getpid()))
        self.acquired = True

    def release(self) -> None:
        if not self.acquired:
            return
        try:
            self._unlink()
        finally:
            self.acquired = False

    def __enter__(self) -> "RegenerationLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def _unlink(self) -> None:
        try:
            os.unlink(self.path)
        except FileNotFoundError:
            pass

    def _age(self) -> float:
        """Seconds since the lock file was written; 0 when there is none."""
        try:
            return time.time() - os.path.getmtime(self.path)
        except OSError:
            return 0.0

    def _read_pid(self) -> Optional[int]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                content = fh.read().strip()
        except OSError:
            return None
        try:
            return int(content)
        except ValueError:
            return None
