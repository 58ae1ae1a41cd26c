"""Parse and format compact duration expressions like ``2h30m``."""

from __future__ import annotations

import re
from datetime import timedelta

from ensure_update.errors import UsageError

_UNITS: dict[str, int] = {
    "w": 7 * 24 * 3600,
    "d": 24 * 3600,
    "h": 3600,
    "m": 60,
    "s": 1,
}

_GROUP_RE = re.compile(r"(\d+)([wdhms])")
_FULL_RE = re.compile(r"(?:\d+[wdhms])+")


def parse_duration(text: str | int | timedelta) -> timedelta:
    """Parse a duration expression into a timedelta.

    Accepts one or more ``<int><unit>`` groups (units: w, d, h, m, s), e.g.
    ``2h30m`` or ``1d``. A bare integer is a number of hours. Whitespace and
    case are ignored.

    Raises UsageError if the expression is empty, malformed, or larger than
    a timedelta can hold.
    """
    if isinstance(text, timedelta):
        if text < timedelta(0):
            raise UsageError(f"Invalid duration {text!r}: must not be negative")
        return text
    if isinstance(text, bool):
        raise UsageError(f"Invalid duration {text!r}")
    if isinstance(text, int):
        if text < 0:
            raise UsageError(f"Invalid duration {text!r}: must not be negative")
        return _hours(text, text)

    raw = re.sub(r"\s+", "", str(text)).lower()
    if not raw:
        raise UsageError("Invalid duration '': expected e.g. '8h' or '2h30m'")
    if raw.isdigit():
        return _hours(int(raw), text)
    if not _FULL_RE.fullmatch(raw):
        raise UsageError(f"Invalid duration {text!r}: expected e.g. '8h' or '2h30m'")

    seconds = sum(int(n) * _UNITS[unit] for n, unit in _GROUP_RE.findall(raw))
    try:
        return timedelta(seconds=seconds)
    except OverflowError as e:
        raise UsageError(f"Invalid duration {text!r}: too large") from e


def _hours(count: int, text: object) -> timedelta:
    try:
        return timedelta(hours=count)
    except OverflowError as e:
        raise UsageError(f"Invalid duration {text!r}: too large") from e


def format_duration(delta: timedelta) -> str:
    """Render a timedelta as ``7h 59m`` style text, rounded down to seconds."""
    total = int(delta.total_seconds())
    if total <= 0:
        return "0s"
    parts: list[str] = []
    for unit in ("d", "h", "m", "s"):
        size = _UNITS[unit]
        count, total = divmod(total, size)
        if count:
            parts.append(f"{count}{unit}")
    return " ".join(parts)
