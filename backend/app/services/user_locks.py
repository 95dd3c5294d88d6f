"""
Gatherly Backend — Per-User Workflow Serialization
====================================================

What:  One asyncio.Lock per username, held for the duration of a photo
       workflow (attach, set-main, delete).
Why:   The "does the user already have a main photo?" check and the commit
       that acts on it must not interleave with another workflow for the
       same user, or both requests can mark their photo main.
Scope: In-process only. Multiple workers are covered by the partial unique
       index on photos (see app.models.photo).

Locks live in a WeakValueDictionary: once no coroutine holds or waits on a
user's lock it is garbage collected, so the registry does not grow with
the number of users ever seen.
"""

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator

logger = logging.getLogger(__name__)


class UserLockRegistry:
    """Hands out a shared asyncio.Lock per username."""

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def lock_for(self, username: str) -> asyncio.Lock:
        lock = self._locks.get(username)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[username] = lock
        return lock

    @asynccontextmanager
    async def hold(self, username: str) -> AsyncIterator[None]:
        lock = self.lock_for(username)
        if lock.locked():
            logger.debug("Waiting for photo workflow lock of '%s'", username)
        async with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)


# Process-wide registry shared by every request
user_locks = UserLockRegistry()
