"""Persistence of accepted signups.

The JSON store keeps every signup in one array file. Writers may live in
separate processes (HTTP server, serverless instances sharing a volume), so
mutual exclusion comes from a lock file next to the data, created with an
atomic exclusive-create and holding the owner's PID. The lock is expected to
be absent between operations.
"""

import json
import logging
import os
import tempfile
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from app.core.config import Settings
from app.core.exceptions import LockTimeoutError, StorageError
from app.schemas.signup import Signup

logger = logging.getLogger(__name__)


class SignupStore(Protocol):
    """Append-only sink for accepted signups."""

    def append(self, signup: Signup) -> None: ...


@contextmanager
def exclusive_lock(
    lock_path: Path,
    attempts: int = 10,
    retry_delay: float = 0.1,
) -> Iterator[None]:
    """Hold the advisory lock at ``lock_path`` for the duration of the block.

    Raises:
        LockTimeoutError: if the lock is still held after ``attempts`` tries.
    """
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    fd: int | None = None
    for attempt in range(1, attempts + 1):
        try:
            fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
            break
        except FileExistsError:
            logger.debug("Lock %s busy (attempt %d/%d)", lock_path, attempt, attempts)
            time.sleep(retry_delay)

    if fd is None:
        raise LockTimeoutError(f"Could not acquire file lock {lock_path}")

    try:
        try:
            os.write(fd, str(os.getpid()).encode())
        finally:
            os.close(fd)
        yield
    finally:
        try:
            lock_path.unlink()
        except OSError:
            logger.exception("Error releasing lock %s", lock_path)


class JsonFileSignupStore:
    """Stores signups as a pretty-printed JSON array in a single file."""

    def __init__(
        self,
        path: Path,
        lock_path: Path,
        lock_attempts: int = 10,
        lock_retry_delay: float = 0.1,
    ) -> None:
        self.path = path
        self.lock_path = lock_path
        self.lock_attempts = lock_attempts
        self.lock_retry_delay = lock_retry_delay

    def append(self, signup: Signup) -> None:
        """Append one signup. The record is on disk when this returns.

        Raises:
            LockTimeoutError: if another writer holds the lock for too long.
            StorageError: if the file cannot be read or written.
        """
        try:
            with exclusive_lock(self.lock_path, self.lock_attempts, self.lock_retry_delay):
                records = self._load()
                records.append(signup.to_record())
                self._write(records)
        except OSError as exc:
            raise StorageError(f"Could not write {self.path}: {exc}") from exc
        logger.info("Signup stored: id=%s email=%s", signup.id, signup.email)

    def read_all(self) -> list[dict[str, Any]]:
        """Return the stored records in insertion order."""
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StorageError(f"Signup file {self.path} is not valid JSON") from exc
        if not isinstance(data, list):
            raise StorageError(f"Signup file {self.path} does not hold an array")
        return data

    def _load(self) -> list[dict[str, Any]]:
        try:
            return self.read_all()
        except StorageError:
            # Keep the unreadable file for manual recovery instead of overwriting it.
            stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%f")
            backup = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
            os.replace(self.path, backup)
            logger.error("Unreadable signup file moved to %s; starting a new one", backup)
            return []

    def _write(self, records: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, indent=2, ensure_ascii=False)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class LogSignupStore:
    """Fallback for storage modes without a backend: records go to the log only."""

    def __init__(self, mode: str) -> None:
        self.mode = mode

    def append(self, signup: Signup) -> None:
        logger.warning("Storage mode not implemented: %s", self.mode)
        logger.info("Signup data: %s", json.dumps(signup.to_record()))


def build_signup_store(settings: Settings) -> SignupStore:
    """Create the store selected by ``storage_mode``."""
    if settings.storage_mode == "json":
        return JsonFileSignupStore(
            path=settings.signups_path,
            lock_path=settings.lock_path,
            lock_attempts=settings.lock_attempts,
            lock_retry_delay=settings.lock_retry_delay_seconds,
        )
    return LogSignupStore(settings.storage_mode)
