"""Git updater: runs ``git pull`` in a local working copy."""

from __future__ import annotations

import logging
import re
import subprocess
from collections.abc import Sequence
from datetime import timedelta
from pathlib import Path

from ensure_update.errors import ClientError, InvalidTargetError, UpdateTimeoutError
from ensure_update.models import UpdateResult
from ensure_update.vcs.base import Updater

logger = logging.getLogger(__name__)

# rev-parse checks are local and fast; only the pull itself honours the
# caller's timeout.
CHECK_TIMEOUT = 30

_UP_TO_DATE_RE = re.compile(r"already up[ -]to[ -]date", re.IGNORECASE)


class GitUpdater(Updater):
    """Update strategy for git working copies using ``git pull``.

    Change detection compares ``HEAD`` before and after the pull. Git is
    always invoked with ``-C <path>`` so the process cwd is never changed.
    """

    name = "git"

    def __init__(
        self,
        git_binary: str = "git",
        pull_args: Sequence[str] = (),
        timeout: timedelta | float | None = None,
    ) -> None:
        self.git_binary = git_binary
        self.pull_args = list(pull_args)
        if isinstance(timeout, timedelta):
            timeout = timeout.total_seconds()
        self.timeout = timeout or None

    def _git(
        self, path: Path, *args: str, timeout: float | None = CHECK_TIMEOUT
    ) -> subprocess.CompletedProcess[str]:
        cmd = [self.git_binary, "-C", str(path), *args]
        logger.debug("running %s", " ".join(cmd))
        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise ClientError(f"git executable not found: {self.git_binary}") from e
        except OSError as e:
            raise ClientError(f"cannot run {self.git_binary}: {e}") from e

    def _head(self, path: Path) -> str | None:
        """Current commit id, or None for an unborn branch."""
        try:
            result = self._git(path, "rev-parse", "--verify", "--quiet", "HEAD")
        except subprocess.TimeoutExpired:
            logger.warning("git rev-parse HEAD timed out in %s", path)
            return None
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def _check_work_tree(self, path: Path) -> None:
        if not path.exists():
            raise InvalidTargetError(f"Target path does not exist: {path}")
        if not path.is_dir():
            raise InvalidTargetError(f"Target path is not a directory: {path}")
        try:
            result = self._git(path, "rev-parse", "--is-inside-work-tree")
        except subprocess.TimeoutExpired as e:
            raise UpdateTimeoutError(f"git rev-parse timed out in {path}") from e
        if result.returncode != 0 or result.stdout.strip() != "true":
            raise InvalidTargetError(f"Not a git working copy: {path}")

    def run(self, path: Path) -> UpdateResult:
        path = Path(path)
        self._check_work_tree(path)

        before = self._head(path)
        logger.info("executing git pull in %s", path)
        try:
            result = self._git(path, "pull", *self.pull_args, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise UpdateTimeoutError(
                f"git pull timed out after {self.timeout:g}s in {path}"
            ) from e

        output = "\n".join(
            part.strip() for part in (result.stdout, result.stderr) if part and part.strip()
        )
        if result.returncode != 0:
            detail = result.stderr.strip() or result.stdout.strip() or "no output"
            raise ClientError(
                f"git pull exited with status {result.returncode}: {detail}",
                returncode=result.returncode,
            )

        after = self._head(path)
        if before is not None and after is not None:
            changed = before != after
        else:
            changed = not _UP_TO_DATE_RE.search(output)

        logger.info("git pull in %s: %s", path, "changes applied" if changed else "already up to date")
        return UpdateResult(
            path=str(path), changed=changed, before=before, after=after, output=output
        )
