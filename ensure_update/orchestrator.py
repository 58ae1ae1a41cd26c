"""Single-run orchestration: load, decide, update, record."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

from ensure_update.errors import StoreWriteError, UpdateFailedError
from ensure_update.freshness import decide
from ensure_update.models import RunOutcome
from ensure_update.store import PathLock, TimestampStore, normalize_path
from ensure_update.vcs import Updater

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Orchestrator:
    """Ties the timestamp store, staleness policy, and updater into one run.

    The clock is injected so runs can be replayed at arbitrary times in
    tests without sleeping or touching file timestamps.
    """

    def __init__(
        self,
        store: TimestampStore,
        updater: Updater,
        clock: Callable[[], datetime] = utc_now,
        lock_timeout: float = 30.0,
    ) -> None:
        self.store = store
        self.updater = updater
        self.clock = clock
        self.lock_timeout = lock_timeout

    def run(
        self,
        path: str | Path,
        interval: timedelta,
        force: bool = False,
        dry_run: bool = False,
    ) -> RunOutcome:
        """Update *path* if it is stale (or *force* is set) and record success.

        A failed update leaves the stored timestamp untouched. A failure to
        record a successful update is reported through ``store_warning`` and
        does not change the outcome; the next run will simply update again.
        """
        target = normalize_path(path)
        if dry_run:
            return self._run_locked(target, interval, force, dry_run)
        with PathLock(self.store.lock_path(target), timeout=self.lock_timeout):
            return self._run_locked(target, interval, force, dry_run)

    def _run_locked(
        self, target: Path, interval: timedelta, force: bool, dry_run: bool
    ) -> RunOutcome:
        last = self.store.load(target)
        decision = decide(last, self.clock(), interval, force)
        logger.debug("%s: last update %s, decision %s (%s)", target, last, decision.action, decision.reason)

        if not decision.should_update:
            return RunOutcome(
                path=str(target),
                status="up_to_date",
                decision=decision,
                remaining=decision.remaining,
                dry_run=dry_run,
            )

        if dry_run:
            return RunOutcome(
                path=str(target), status="updated", decision=decision, dry_run=True
            )

        try:
            result = self.updater.run(target)
        except UpdateFailedError as e:
            logger.info("%s update failed for %s: %s", self.updater.name, target, e)
            return RunOutcome(
                path=str(target),
                status="update_failed",
                decision=decision,
                failure=e.to_failure(),
            )

        store_warning = None
        try:
            self.store.save(target, self.clock())
        except StoreWriteError as e:
            logger.warning("update succeeded but could not be recorded: %s", e)
            store_warning = str(e)

        return RunOutcome(
            path=str(target),
            status="updated",
            decision=decision,
            update=result,
            store_warning=store_warning,
        )
