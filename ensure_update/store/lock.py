"""Advisory per-path lock so only one process updates a working copy at a time."""

from __future__ import annotations

import fcntl
import logging
import time
from pathlib import Path
from typing import IO

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.1


class PathLock:
    """Exclusive ``flock`` on a lock file, held for the duration of a run.

    Acquisition polls for up to *timeout* seconds. If the lock cannot be
    taken (timeout, an unusable lock file, or a filesystem without flock
    support) the run continues
    without it and ``acquired`` stays False; two overlapping runs then may
    both update, which is redundant but harmless.
    """

    def __init__(self, lock_file: str | Path, timeout: float = 30.0) -> None:
        self.lock_file = Path(lock_file)
        self.timeout = timeout
        self.acquired = False
        self._handle: IO[str] | None = None

    def acquire(self) -> bool:
        try:
            self.lock_file.parent.mkdir(parents=True, exist_ok=True)
            self._handle = open(self.lock_file, "a")
        except OSError as e:
            logger.warning("cannot open lock file %s: %s; continuing unlocked", self.lock_file, e)
            return False

        deadline = time.monotonic() + self.timeout
        while True:
            try:
                fcntl.flock(self._handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                self.acquired = True
                return True
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    logger.warning(
                        "timed out after %.1fs waiting for %s; continuing unlocked",
                        self.timeout,
                        self.lock_file,
                    )
                    self._close()
                    return False
                time.sleep(_POLL_INTERVAL)
            except OSError as e:
                logger.warning("cannot lock %s: %s; continuing unlocked", self.lock_file, e)
                self._close()
                return False

    def release(self) -> None:
        if self._handle is None:
            return
        if self.acquired:
            fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)
            self.acquired = False
        self._close()

    def _close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> PathLock:
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()
