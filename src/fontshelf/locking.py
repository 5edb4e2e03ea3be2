"""Per-repository mutual exclusion for release tree mutations."""

from __future__ import annotations

import contextlib
import threading
from collections.abc import Iterator
from pathlib import Path

_locks: dict[Path, threading.Lock] = {}
_locks_guard = threading.Lock()


def _lock_for(root: Path) -> threading.Lock:
    key = root.resolve()
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.Lock()
        return lock


@contextlib.contextmanager
def repository_lock(root: Path) -> Iterator[None]:
    """Hold the lock of ``root`` for the duration of the block.

    Release and release-delete both rewrite the README and share one git
    working tree, so they must not interleave.
    """
    lock = _lock_for(root)
    with lock:
        yield
