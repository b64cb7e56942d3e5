"""Exclusive lock on the state file."""

from __future__ import annotations

import logging
import os
import sys
import time
from pathlib import Path
from typing import IO, TYPE_CHECKING

from heroku_provisioner.engine.errors import StateLockError

if TYPE_CHECKING:
    from types import TracebackType

try:
    import fcntl  # type: ignore[attr-defined]
except ImportError:  # pragma: no cover
    fcntl = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.2


def _lock_nb(fh: IO[str]) -> bool:
    if fcntl is not None:
        try:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            return False
        return True
    if sys.platform == "win32":  # pragma: no cover
        import msvcrt

        try:
            msvcrt.locking(fh.fileno(), msvcrt.LK_NBLCK, 1)
        except OSError:
            return False
        return True
    raise StateLockError("State locking is not supported on this platform")


def _unlock(fh: IO[str]) -> None:
    if fcntl is not None:
        fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
    elif sys.platform == "win32":  # pragma: no cover
        import msvcrt

        msvcrt.locking(fh.fileno(), msvcrt.LK_UNLCK, 1)


class StateLock:
    """Holds ``<state>.lock`` for the duration of a ``with`` block.

    The holder writes its PID into the file; a process that times out waiting
    reports that PID. ``timeout=None`` waits forever.
    """

    def __init__(self, state_path: Path, *, timeout: float | None = 30.0) -> None:
        self._lock_path = Path(str(state_path) + ".lock")
        self._timeout = timeout
        self._fh: IO[str] | None = None

    @property
    def path(self) -> Path:
        return self._lock_path

    def _holder(self, fh: IO[str]) -> str:
        fh.seek(0)
        pid = fh.read().strip()
        return f" (held by pid {pid})" if pid else ""

    def _wait(self, fh: IO[str]) -> None:
        deadline = None if self._timeout is None else time.monotonic() + self._timeout
        while not _lock_nb(fh):
            if deadline is not None and time.monotonic() >= deadline:
                raise StateLockError(
                    f"Timed out after {self._timeout:g}s waiting for state lock "
                    f"{self._lock_path}{self._holder(fh)}"
                )
            time.sleep(_POLL_INTERVAL)

    def __enter__(self) -> StateLock:
        self._lock_path.parent.mkdir(parents=True, exist_ok=True)
        fh = self._lock_path.open("a+", encoding="utf-8")
        try:
            self._wait(fh)
        except StateLockError:
            fh.close()
            raise
        except OSError as e:
            fh.close()
            raise StateLockError(f"Cannot lock {self._lock_path}: {e}") from e

        fh.seek(0)
        fh.truncate()
        fh.write(f"{os.getpid()}\n")
        fh.flush()
        self._fh = fh
        logger.debug("Acquired state lock %s", self._lock_path)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        fh, self._fh = self._fh, None
        if fh is None:
            return
        try:
            fh.seek(0)
            fh.truncate()
            _unlock(fh)
        finally:
            fh.close()
            logger.debug("Released state lock %s", self._lock_path)
