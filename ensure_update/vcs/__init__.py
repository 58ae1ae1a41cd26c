"""Updaters that refresh a working copy from upstream."""

from ensure_update.config.models import VCSConfig
from ensure_update.vcs.base import Updater
from ensure_update.vcs.git import GitUpdater


def create_updater(config: VCSConfig, timeout: float | None = None) -> Updater:
    """Create an updater from config.

    *timeout* (seconds) overrides ``config.timeout`` when given.
    """
    if config.provider != "git":
        raise ValueError(
            f"Unsupported VCS provider: {config.provider!r}. "
            "Currently only 'git' is supported."
        )
    if timeout is None and config.timeout is not None:
        timeout = config.timeout.total_seconds()
    return GitUpdater(
        git_binary=config.git_binary,
        pull_args=config.pull_args,
        timeout=timeout,
    )


__all__ = [
    "GitUpdater",
    "Updater",
    "create_updater",
]
