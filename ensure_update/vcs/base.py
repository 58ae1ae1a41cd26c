"""Abstract updater interface for ensure-update."""

from abc import ABC, abstractmethod
from pathlib import Path

from ensure_update.models import UpdateResult


class Updater(ABC):
    """Refreshes a working copy from its upstream.

    Implementations invoke their client exactly once per ``run`` call and
    never retry. Failures are raised as ``UpdateFailedError`` subclasses so
    the caller can tell an invalid target from a client failure or timeout.
    """

    name: str = "updater"

    @abstractmethod
    def run(self, path: Path) -> UpdateResult:
        """Update the working copy at *path*.

        Returns an UpdateResult whose ``changed`` flag separates "changes
        applied" from "already up to date".

        Raises:
            InvalidTargetError: *path* is missing or not a working copy.
            ClientError: the client exited with a failure status.
            UpdateTimeoutError: the client did not finish in time.
        """
        ...
