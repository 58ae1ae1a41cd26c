"""Per-path timestamp records with atomic writes."""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from ensure_update.errors import StoreReadError, StoreWriteError
from ensure_update.models import UpdateRecord

logger = logging.getLogger(__name__)

RECORDS_DIR = "records"


def normalize_path(path: str | Path) -> Path:
    """Absolute, symlink-resolved form of *path* used as the record key."""
    return Path(path).expanduser().resolve()


def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class TimestampStore:
    """Maps a working copy path to the time of its last successful update.

    Each path gets its own JSON file under ``<state_dir>/records/``, named by
    a hash of the normalized path, so paths never interfere with each other.
    """

    def __init__(self, state_dir: str | Path) -> None:
        self.state_dir = Path(state_dir).expanduser()
        self.records_dir = self.state_dir / RECORDS_DIR

    def record_path(self, path: str | Path) -> Path:
        key = hashlib.sha256(str(normalize_path(path)).encode()).hexdigest()[:16]
        return self.records_dir / f"{key}.json"

    def lock_path(self, path: str | Path) -> Path:
        return self.record_path(path).with_suffix(".lock")

    # -- read --------------------------------------------------------------

    def load(self, path: str | Path) -> datetime | None:
        """Return the recorded update time for *path*, or None.

        Missing, unreadable, and corrupt records all read as "never updated".
        """
        try:
            record = self._read_record(path)
        except StoreReadError as e:
            logger.warning("ignoring unreadable record: %s", e)
            return None
        if record is None:
            return None
        return record.last_update_time

    def _read_record(self, path: str | Path) -> UpdateRecord | None:
        record_file = self.record_path(path)
        try:
            raw = record_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreReadError(f"{record_file}: {e}") from e

        try:
            record = UpdateRecord.model_validate_json(raw)
        except ValidationError as e:
            raise StoreReadError(f"{record_file}: invalid record ({e.error_count()} errors)") from e

        expected = str(normalize_path(path))
        if record.path != expected:
            raise StoreReadError(
                f"{record_file}: belongs to {record.path!r}, not {expected!r}"
            )
        if record.last_update_time is not None:
            record.last_update_time = _as_utc(record.last_update_time)
        return record

    # -- write -------------------------------------------------------------

    def save(self, path: str | Path, timestamp: datetime) -> Path:
        """Atomically persist *timestamp* as the last update time for *path*.

        Writes a temp file next to the record, fsyncs it, then renames it into
        place so concurrent readers see either the old or the new record.

        Raises StoreWriteError if the state directory is not writable.
        """
        record = UpdateRecord(
            path=str(normalize_path(path)), last_update_time=_as_utc(timestamp)
        )
        record_file = self.record_path(path)
        payload = record.model_dump_json(indent=2)

        try:
            record_file.parent.mkdir(parents=True, exist_ok=True)
            tmp_fd, tmp_path = tempfile.mkstemp(
                dir=str(record_file.parent), prefix=f".{record_file.stem}_", suffix=".tmp"
            )
        except OSError as e:
            raise StoreWriteError(f"Failed to write {record_file}: {e}") from e

        try:
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, record_file)
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise StoreWriteError(f"Failed to write {record_file}: {e}") from e

        logger.debug("recorded %s for %s in %s", record.last_update_time, record.path, record_file)
        return record_file
