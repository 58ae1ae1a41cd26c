"""Staleness decision: should this run update the working copy or skip it?"""

from __future__ import annotations

from datetime import datetime, timedelta

from ensure_update.models import RunDecision


def decide(
    last_update_time: datetime | None,
    now: datetime,
    interval: timedelta,
    force: bool = False,
) -> RunDecision:
    """Decide whether an update is due.

    Rules, first match wins:

    1. ``force`` always updates.
    2. A path never recorded is maximally stale.
    3. Elapsed time at or past *interval* updates.
    4. Otherwise skip, reporting the time left until the next update is due.

    A *last_update_time* in the future (clock skew, edited record) counts as
    zero elapsed time rather than an error.
    """
    if interval < timedelta(0):
        raise ValueError(f"interval must not be negative, got {interval}")
    if force:
        return RunDecision.update("forced")
    if last_update_time is None:
        return RunDecision.update("never updated")

    elapsed = max(now - last_update_time, timedelta(0))
    if elapsed >= interval:
        return RunDecision.update("stale")
    return RunDecision.skip(interval - elapsed)
