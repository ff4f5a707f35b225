# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for keyed enrollment locks."""

import asyncio

import pytest

from src.domains.enrollment.locks import LockRegistry, class_key, student_key


class TestLockRegistry:
    """Tests for LockRegistry."""

    def test_same_key_same_lock(self):
        registry = LockRegistry()

        assert registry.get("student:1") is registry.get("student:1")
        assert registry.get("student:1") is not registry.get("student:2")

    def test_keys(self):
        assert student_key("s1") == "student:s1"
        assert class_key("c1") == "class:c1"
        assert class_key(None) is None

    @pytest.mark.asyncio
    async def test_hold_ignores_missing_keys(self):
        registry = LockRegistry()

        async with registry.hold(student_key("s1"), class_key(None)):
            assert registry.get("student:s1").locked()

        assert not registry.get("student:s1").locked()

    @pytest.mark.asyncio
    async def test_hold_serialises_same_key(self):
        registry = LockRegistry()
        order = []

        async def worker(name: str):
            async with registry.hold("class:c1"):
                order.append(f"{name}-start")
                await asyncio.sleep(0.01)
                order.append(f"{name}-end")

        await asyncio.gather(worker("a"), worker("b"))

        assert order == ["a-start", "a-end", "b-start", "b-end"]

    @pytest.mark.asyncio
    async def test_opposite_key_order_does_not_deadlock(self):
        registry = LockRegistry()

        async def worker(*keys: str):
            async with registry.hold(*keys):
                await asyncio.sleep(0.01)

        await asyncio.wait_for(
            asyncio.gather(
                worker("student:s1", "class:c1"),
                worker("class:c1", "student:s1"),
            ),
            timeout=1,
        )
