"""Per-branch mutual exclusion for setup writes.

Operations on the same branch are serialized inside this process; the
setup row is additionally loaded FOR UPDATE so separate worker processes
serialize on the database. Different branches never contend.

Locks are held in a WeakValueDictionary, so a branch's lock disappears
once no request is holding or waiting on it.
"""

from __future__ import annotations

import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator

_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()


def get_branch_lock(branch_id: str) -> asyncio.Lock:
    lock = _locks.get(branch_id)
    if lock is None:
        lock = asyncio.Lock()
        _locks[branch_id] = lock
    return lock


@asynccontextmanager
async def branch_lock(branch_id: str) -> AsyncIterator[None]:
    lock = get_branch_lock(branch_id)
    async with lock:
        yield
