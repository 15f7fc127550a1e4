"""Directory-scoped exclusive locks shared across threads and processes.

The lock is an ``fcntl.flock`` on a lock file inside the locked directory, so
it is addressed by path and holds across worker threads, operator restarts
and replicas sharing the same data volume.
"""

from __future__ import annotations

import errno
import fcntl
import logging
import os
from pathlib import Path
from typing import Callable

from ..constants import LOCK_FILE_NAME
from .errors import LockAcquisitionError

logger = logging.getLogger(__name__)

_CONTENTION_ERRNOS = {errno.EWOULDBLOCK, errno.EAGAIN, errno.EACCES}


def with_write_lock(directory: str | os.PathLike[str], action: Callable[[], None]) -> bool:
    """Run ``action`` while holding the exclusive lock for ``directory``.

    Acquisition never blocks: if another holder owns the lock the action is
    not invoked and ``False`` is returned. When the lock is taken the action
    runs to completion and the lock is released before returning ``True``;
    an exception raised by the action propagates after the release.

    Args:
        directory: Directory guarded by the lock. It must already exist.
        action: Callable run while the lock is held.

    Returns:
        Whether the lock was acquired (and therefore the action ran).

    Raises:
        LockAcquisitionError: The lock file could not be opened or locked for
            a reason other than contention.
    """
    lock_path = Path(directory) / LOCK_FILE_NAME
    try:
        fd = os.open(lock_path, os.O_RDWR | os.O_CREAT, 0o600)
    except OSError as e:
        raise LockAcquisitionError(f"failed to open lock file {lock_path}: {e}") from e

    try:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            if e.errno in _CONTENTION_ERRNOS:
                logger.debug(f"Lock {lock_path} is held elsewhere")
                return False
            raise LockAcquisitionError(f"failed to lock {lock_path}: {e}") from e

        try:
            action()
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
        return True
    finally:
        os.close(fd)
