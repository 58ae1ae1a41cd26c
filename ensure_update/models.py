"""Pydantic models shared across the store, policy, updater, and orchestrator."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class UpdateRecord(BaseModel):
    """Persisted state for one target path."""

    path: str = Field(description="Absolute, normalized working copy path")
    last_update_time: datetime | None = None


class RunDecision(BaseModel):
    """Whether a run should update or skip."""

    model_config = ConfigDict(frozen=True)

    action: Literal["update", "skip"]
    reason: str = ""
    remaining: timedelta = timedelta(0)

    @classmethod
    def update(cls, reason: str) -> RunDecision:
        return cls(action="update", reason=reason)

    @classmethod
    def skip(cls, remaining: timedelta) -> RunDecision:
        return cls(action="skip", reason="fresh", remaining=remaining)

    @property
    def should_update(self) -> bool:
        return self.action == "update"


class UpdateResult(BaseModel):
    """A satisfied refresh, with or without new changes."""

    path: str
    changed: bool
    before: str | None = None
    after: str | None = None
    output: str = ""


class UpdateFailure(BaseModel):
    """Why an attempted update did not succeed."""

    kind: Literal["invalid_target", "client_error", "timeout"]
    detail: str
    returncode: int | None = None


class RunOutcome(BaseModel):
    """Result of one run, reported to the caller."""

    path: str
    status: Literal["up_to_date", "updated", "update_failed"]
    decision: RunDecision
    remaining: timedelta | None = None
    update: UpdateResult | None = None
    failure: UpdateFailure | None = None
    store_warning: str | None = None
    dry_run: bool = False

    @property
    def exit_code(self) -> int:
        return 1 if self.status == "update_failed" else 0
