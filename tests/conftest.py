"""Shared test fixtures for ensure-update."""

from __future__ import annotations

import shutil
import subprocess
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from ensure_update.errors import UpdateFailedError
from ensure_update.models import UpdateResult
from ensure_update.store import TimestampStore
from ensure_update.vcs.base import Updater

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeUpdater(Updater):
    """Updater double: records calls and returns or raises a scripted result."""

    name = "fake"

    def __init__(self, error: UpdateFailedError | None = None, changed: bool = True) -> None:
        self.error = error
        self.changed = changed
        self.calls: list[Path] = []

    def run(self, path: Path) -> UpdateResult:
        self.calls.append(Path(path))
        if self.error is not None:
            raise self.error
        return UpdateResult(
            path=str(path),
            changed=self.changed,
            before="a" * 40,
            after=("b" if self.changed else "a") * 40,
            output="Fast-forward" if self.changed else "Already up to date.",
        )


class FakeClock:
    """Settable clock for orchestrator runs."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def state_dir(tmp_path):
    return tmp_path / "state"


@pytest.fixture
def store(state_dir):
    return TimestampStore(state_dir)


@pytest.fixture
def repo_dir(tmp_path):
    """A plain directory standing in for a working copy."""
    path = tmp_path / "repo"
    path.mkdir()
    return path


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_updater():
    return FakeUpdater()


@pytest.fixture
def updater_cls():
    """The FakeUpdater class, for tests that script errors or subclass it."""
    return FakeUpdater


# ── real git ─────────────────────────────────────────────────────────


@pytest.fixture
def requires_git():
    if shutil.which("git") is None:
        pytest.skip("git not installed")


def _run_git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        [
            "git",
            "-c", "user.name=Test",
            "-c", "user.email=test@example.com",
            "-c", "commit.gpgsign=false",
            *args,
        ],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _commit_file(repo: Path, name: str, content: str) -> str:
    (repo / name).write_text(content)
    _run_git(repo, "add", name)
    _run_git(repo, "commit", "-q", "-m", f"update {name}")
    return _run_git(repo, "rev-parse", "HEAD")


@pytest.fixture
def git():
    """Run a git command in a directory and return its stripped stdout."""
    return _run_git


@pytest.fixture
def commit_file():
    """Write, add and commit a file; returns the new HEAD."""
    return _commit_file


@pytest.fixture
def git_remote_and_clone(tmp_path, requires_git):
    """An upstream repo with one commit and a clone that tracks it."""
    upstream = tmp_path / "upstream"
    upstream.mkdir()
    _run_git(upstream, "init", "-q")
    _commit_file(upstream, "README.md", "# project\n")
    clone = tmp_path / "clone"
    _run_git(tmp_path, "clone", "-q", str(upstream), str(clone))
    return upstream, clone
