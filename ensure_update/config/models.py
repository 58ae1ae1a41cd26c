from datetime import timedelta
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from ensure_update.durations import parse_duration

DEFAULT_STATE_DIR = "~/.ensure-update/state"


class VCSConfig(BaseModel):
    provider: Literal["git"] = "git"
    git_binary: str = "git"
    pull_args: list[str] = []
    timeout: timedelta | None = timedelta(minutes=10)

    @field_validator("timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: object) -> object:
        if value is None:
            return None
        return parse_duration(value)


class StoreConfig(BaseModel):
    state_dir: str = DEFAULT_STATE_DIR
    lock_timeout: float = Field(default=30.0, ge=0)


class EnsureUpdateConfig(BaseModel):
    interval: timedelta = timedelta(hours=8)
    vcs: VCSConfig = Field(default_factory=VCSConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "warn"

    @field_validator("interval", mode="before")
    @classmethod
    def _parse_interval(cls, value: object) -> object:
        return parse_duration(value)
