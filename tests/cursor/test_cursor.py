"""Tests for cursor implementations."""

import asyncio
import threading

import pytest

from run_partition.cursor.cursor import AsyncLockedCursor, ExclusiveCursor, LockedCursor
from run_partition.cursor.types import MISSING
from run_partition.errors import ProtocolViolation


class TestExclusiveCursor:
    """Test cases for ExclusiveCursor."""

    def test_advance_records_pending_lookahead(self) -> None:
        """Test that the lookahead of the last pair is kept as pending."""
        cursor = ExclusiveCursor([1, 2])

        with cursor.borrow() as state:
            assert cursor.advance() == (1, 2)
            assert state.pending == 2
            assert cursor.advance() == (2, MISSING)
            assert state.pending is MISSING
            assert cursor.advance() is None
            assert state.exhausted
            assert state.stats.items_read == 2

    def test_nested_borrow_is_rejected(self) -> None:
        """Test that a second borrow while the first is held raises."""
        cursor = ExclusiveCursor([1])

        with cursor.borrow():
            with pytest.raises(ProtocolViolation):
                with cursor.borrow():
                    pass

        # The failed nested borrow does not leave the cursor locked.
        with cursor.borrow():
            assert cursor.holds_borrow()
        assert not cursor.holds_borrow()

    def test_advance_requires_borrow(self) -> None:
        cursor = ExclusiveCursor([1])
        with pytest.raises(ProtocolViolation):
            cursor.advance()

    def test_borrow_released_on_error(self) -> None:
        cursor = ExclusiveCursor([1])

        with pytest.raises(KeyError):
            with cursor.borrow():
                raise KeyError("boom")

        assert not cursor.holds_borrow()


class TestLockedCursor:
    """Test cases for LockedCursor."""

    def test_same_thread_reentry_is_rejected(self) -> None:
        """Test that re-entry from the holding thread raises instead of deadlocking."""
        cursor = LockedCursor([1])

        with cursor.borrow():
            with pytest.raises(ProtocolViolation):
                with cursor.borrow():
                    pass

    def test_other_thread_waits_for_release(self) -> None:
        """Test that a borrow from another thread blocks until release."""
        cursor = LockedCursor([1, 2])
        acquired = threading.Event()
        seen: list = []

        def worker() -> None:
            with cursor.borrow():
                acquired.set()
                seen.append(cursor.advance())

        with cursor.borrow():
            thread = threading.Thread(target=worker)
            thread.start()
            assert not acquired.wait(timeout=0.05)
            assert seen == []

        thread.join(timeout=5)
        assert acquired.is_set()
        assert seen == [(1, 2)]

    def test_advance_requires_borrow_on_this_thread(self) -> None:
        cursor = LockedCursor([1])
        with pytest.raises(ProtocolViolation):
            cursor.advance()


class TestAsyncLockedCursor:
    """Test cases for AsyncLockedCursor."""

    def test_advance_suspends_on_upstream(self) -> None:
        """Test that pulling awaits the upstream and records the pair."""

        async def source():
            for item in ("x", "y"):
                await asyncio.sleep(0)
                yield item

        async def _run() -> tuple:
            cursor = AsyncLockedCursor(source())
            async with cursor.borrow() as state:
                pair = await cursor.advance()
                return pair, state.pending

        assert asyncio.run(_run()) == (("x", "y"), "y")

    def test_same_task_reentry_is_rejected(self) -> None:
        async def _run() -> None:
            cursor = AsyncLockedCursor(_empty())
            async with cursor.borrow():
                async with cursor.borrow():
                    pass

        with pytest.raises(ProtocolViolation):
            asyncio.run(_run())

    def test_advance_requires_borrow(self) -> None:
        async def _run() -> None:
            await AsyncLockedCursor(_empty()).advance()

        with pytest.raises(ProtocolViolation):
            asyncio.run(_run())


async def _empty():
    return
    yield
