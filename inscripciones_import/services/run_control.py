from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

"""Run control for an import: cancellation and the single-in-flight guard.

Cancellation is cooperative. The pipeline checks the token between phases and
before every collaborator call; once set, no further calls are issued and the
partial result is returned flagged as cancelled.

The guard is a lock file created with O_EXCL, so two imports started from
different processes cannot race on the same reference catalogs.
"""

__all__ = [
    "CancellationToken",
    "ImportCancelled",
    "ImportInProgressError",
    "import_lock",
]

logger = logging.getLogger(__name__)


class ImportCancelled(Exception):
    """Raised inside the pipeline when the cancellation token is set."""


class ImportInProgressError(Exception):
    """Raised when another import holds the lock file."""


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ImportCancelled("import cancelled")


def check_cancelled(token: CancellationToken | None) -> None:
    if token is not None:
        token.raise_if_cancelled()


def _lock_owner(path: Path) -> int | None:
    try:
        return int(path.read_text(encoding="ascii").strip())
    except (OSError, ValueError):
        return None


def _pid_alive(pid: int) -> bool:
    if pid <= 0:
        return False
    if os.name == "nt":
        # signal 0 would terminate the process on Windows; assume alive
        return True
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


def _open_lock(path: Path) -> int:
    try:
        return os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
    except FileExistsError:
        owner = _lock_owner(path)
        if owner is None or _pid_alive(owner):
            raise
    # the owner died without releasing (SIGKILL, power loss)
    logger.warning("removing stale lock file %s (pid %d is not running)", path, owner)
    path.unlink(missing_ok=True)
    return os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)


@contextmanager
def import_lock(path: Path) -> Iterator[Path]:
    """Hold the lock file for the duration of one import.

    A lock left behind by a process that is no longer running is replaced.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        fd = _open_lock(path)
    except FileExistsError as e:
        owner = _lock_owner(path)
        raise ImportInProgressError(
            f"another import is running (pid {owner if owner is not None else '?'}, lock file {path}); "
            f"delete the lock file if no import is running"
        ) from e
    try:
        os.write(fd, str(os.getpid()).encode("ascii"))
    finally:
        os.close(fd)
    logger.debug("lock acquired %s", path)
    try:
        yield path
    finally:
        try:
            path.unlink()
        except FileNotFoundError:  # pragma: no cover
            logger.warning("lock file already removed: %s", path)
