"""Per-worker pending state for the module currently executing on a worker.

The orchestrator runs each module on one worker thread; events for that
module arrive on that thread.  Rather than ambient thread-locals, state is
kept in an explicit map keyed by worker id.  Each worker only ever touches
its own bucket, so buckets need no locking; the map itself is guarded for
concurrent insert/remove.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Hashable, Iterable
from typing import Generic, TypeVar

T = TypeVar("T")


def current_worker() -> int:
    """Identifier of the calling worker (the OS-level thread id)."""
    return threading.get_ident()


class ModuleAccumulator(Generic[T]):
    """Insertion-ordered, de-duplicated pending items per worker.

    Parameters
    ----------
    identity:
        Key function; two items with the same key are the same item and the
        first one added is kept.
    """

    def __init__(self, identity: Callable[[T], Hashable]) -> None:
        self._identity = identity
        self._buckets: dict[Hashable, dict[Hashable, T]] = {}
        self._lock = threading.Lock()

    def get_or_create(self, worker: Hashable | None = None) -> dict[Hashable, T]:
        """Return the worker's bucket, creating an empty one on first use."""
        key = current_worker() if worker is None else worker
        with self._lock:
            return self._buckets.setdefault(key, {})

    def items(self, worker: Hashable | None = None) -> list[T]:
        return list(self.get_or_create(worker).values())

    def add(self, item: T, worker: Hashable | None = None) -> None:
        self.get_or_create(worker).setdefault(self._identity(item), item)

    def add_all(self, items: Iterable[T], worker: Hashable | None = None) -> None:
        bucket = self.get_or_create(worker)
        for item in items:
            bucket.setdefault(self._identity(item), item)

    def replace(self, items: Iterable[T], worker: Hashable | None = None) -> None:
        """Replace the worker's bucket with *items* (not additive)."""
        key = current_worker() if worker is None else worker
        bucket: dict[Hashable, T] = {}
        for item in items:
            bucket.setdefault(self._identity(item), item)
        with self._lock:
            self._buckets[key] = bucket

    def clear(self, worker: Hashable | None = None) -> None:
        """Drop the worker's binding entirely."""
        key = current_worker() if worker is None else worker
        with self._lock:
            self._buckets.pop(key, None)

    @property
    def active_workers(self) -> int:
        with self._lock:
            return len(self._buckets)
