# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Keyed asyncio locks serialising in-process enrollment mutations.

Locks are keyed by entity ("student:<id>", "class:<id>") and always
acquired in sorted key order, so two transitions touching the same
student and class cannot deadlock.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager


class LockRegistry:
    """Registry of named asyncio locks."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, *keys: str | None) -> AsyncIterator[None]:
        """Hold every named lock for the duration of the block.

        None keys are ignored so callers can pass optional ids directly.
        """
        async with AsyncExitStack() as stack:
            for key in sorted({k for k in keys if k}):
                await stack.enter_async_context(self.get(key))
            yield

    def clear(self) -> None:
        self._locks.clear()


def student_key(student_id: str) -> str:
    return f"student:{student_id}"


def class_key(class_id: str | None) -> str | None:
    return f"class:{class_id}" if class_id else None


_registry: LockRegistry | None = None


def get_lock_registry() -> LockRegistry:
    """Get the process-wide lock registry."""
    global _registry
    if _registry is None:
        _registry = LockRegistry()
    return _registry


def reset_lock_registry() -> None:
    """Reset the lock registry (used by tests)."""
    global _registry
    _registry = None
