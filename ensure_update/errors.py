"""Exception hierarchy for ensure-update."""

from __future__ import annotations

from ensure_update.models import UpdateFailure


class EnsureUpdateError(Exception):
    """Base class for every error raised by ensure-update."""


class UsageError(EnsureUpdateError, ValueError):
    """Invalid invocation: bad flags, bad duration, or bad target path."""


class ConfigError(EnsureUpdateError, ValueError):
    """Config file could not be parsed or failed validation."""


class UpdateFailedError(EnsureUpdateError):
    """An update was attempted and did not succeed.

    Carries enough context to build an ``UpdateFailure`` for the run outcome.
    """

    kind = "client_error"

    def __init__(self, detail: str, returncode: int | None = None) -> None:
        self.detail = detail
        self.returncode = returncode
        super().__init__(detail)

    def to_failure(self) -> UpdateFailure:
        return UpdateFailure(
            kind=self.kind, detail=self.detail, returncode=self.returncode
        )


class InvalidTargetError(UpdateFailedError):
    """Target path is missing or is not a working copy."""

    kind = "invalid_target"


class ClientError(UpdateFailedError):
    """The external client exited with a failure status."""

    kind = "client_error"


class UpdateTimeoutError(UpdateFailedError):
    """The external client did not finish within the allowed time."""

    kind = "timeout"


class StoreReadError(EnsureUpdateError):
    """A timestamp record exists but could not be read or parsed."""


class StoreWriteError(EnsureUpdateError):
    """A timestamp record could not be written."""
