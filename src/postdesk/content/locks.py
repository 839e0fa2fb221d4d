"""Per-post mutual exclusion strategies for mutating operations."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager, nullcontext
from typing import ContextManager, Protocol


class PostLocks(Protocol):
    """Strategy that serializes writers against one or more post roots."""

    def hold(self, *slugs: str) -> ContextManager[None]:
        """Return a context manager holding the locks for ``slugs``."""
        ...


class NullLocks:
    """No serialization; concurrent writers race at the filesystem level."""

    def hold(self, *slugs: str) -> ContextManager[None]:
        return nullcontext()


class KeyedLocks:
    """One ``threading.Lock`` per post slug.

    Multiple slugs are acquired in sorted order so that a rename between two
    posts cannot deadlock against the reverse rename. A lock lives only while
    someone holds or waits for it, so slugs of deleted posts and rejected
    requests are not retained.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._users: dict[str, int] = {}

    def tracked(self) -> int:
        """Number of slugs that currently have a lock."""
        with self._guard:
            return len(self._locks)

    def _checkout(self, slug: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(slug)
            if lock is None:
                lock = threading.Lock()
                self._locks[slug] = lock
            self._users[slug] = self._users.get(slug, 0) + 1
            return lock

    def _checkin(self, slug: str) -> None:
        with self._guard:
            self._users[slug] -= 1
            if not self._users[slug]:
                del self._users[slug]
                del self._locks[slug]

    @contextmanager
    def hold(self, *slugs: str) -> Iterator[None]:
        keys = sorted(set(slugs))
        locks = [self._checkout(slug) for slug in keys]
        acquired: list[threading.Lock] = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for slug in keys:
                self._checkin(slug)


def build_locks(strategy: str) -> PostLocks:
    """Create the lock strategy named in configuration.

    Args:
        strategy: ``keyed`` or ``none``.

    Returns:
        Lock strategy instance.

    Raises:
        ValueError: If the strategy name is unknown.
    """
    if strategy == "keyed":
        return KeyedLocks()
    if strategy == "none":
        return NullLocks()
    raise ValueError(f"Unknown lock strategy: {strategy}")
