"""Cursor implementations, one per synchronisation regime."""

import asyncio
import threading
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator
from contextlib import asynccontextmanager, contextmanager

from run_partition.cursor.lookahead import AsyncLookaheadPairs, LookaheadPairs
from run_partition.cursor.state import CursorState
from run_partition.cursor.types import Pair
from run_partition.errors import ProtocolViolation


class ExclusiveCursor[T]:
    """
    Cursor for a single sequential caller.

    Only one borrow may be active at a time. A second borrow while the first
    is held (for example a key function or upstream iterator that calls back
    into the partitions) raises ProtocolViolation instead of corrupting the
    shared state.
    """

    def __init__(self, iterable: Iterable[T]):
        self._pairs = LookaheadPairs(iterable)
        self.state: CursorState[T, object] = CursorState()
        self._borrowed = False

    @contextmanager
    def borrow(self) -> Iterator[CursorState[T, object]]:
        """Hold the cursor for one logical step."""
        if self._borrowed:
            raise ProtocolViolation("cursor is already borrowed")

        self._borrowed = True
        try:
            yield self.state
        finally:
            self._borrowed = False

    def holds_borrow(self) -> bool:
        return self._borrowed

    def advance(self) -> Pair[T] | None:
        """Pull the next pair from upstream, or None once it is exhausted."""
        if not self.holds_borrow():
            raise ProtocolViolation("advance() called without borrowing the cursor")
        return self.state.record(next(self._pairs, None))


class LockedCursor[T](ExclusiveCursor[T]):
    """
    Cursor guarded by a lock, for partitions handed between threads.

    Borrows from different threads are serialised. A borrow from the thread
    that already holds the lock raises ProtocolViolation rather than
    deadlocking.
    """

    def __init__(self, iterable: Iterable[T]):
        super().__init__(iterable)
        self._lock = threading.Lock()
        self._owner: int | None = None

    @contextmanager
    def borrow(self) -> Iterator[CursorState[T, object]]:
        ident = threading.get_ident()
        if self._owner == ident:
            raise ProtocolViolation("cursor re-entered by the thread holding it")

        with self._lock:
            self._owner = ident
            try:
                yield self.state
            finally:
                self._owner = None

    def holds_borrow(self) -> bool:
        return self._owner == threading.get_ident()


class AsyncLockedCursor[T]:
    """
    Cursor over an async iterable, guarded by an asyncio lock.

    Pulling from upstream is an await point: the borrowing task suspends
    until the next item is ready while unrelated tasks keep running. The
    pulled pair is recorded before the lock is released.
    """

    def __init__(self, aiterable: AsyncIterable[T]):
        self._pairs = AsyncLookaheadPairs(aiterable)
        self.state: CursorState[T, object] = CursorState()
        self._lock = asyncio.Lock()
        self._owner: asyncio.Task | None = None

    @asynccontextmanager
    async def borrow(self) -> AsyncIterator[CursorState[T, object]]:
        """Hold the cursor for one logical step."""
        task = asyncio.current_task()
        if self._owner is not None and self._owner is task:
            raise ProtocolViolation("cursor re-entered by the task holding it")

        async with self._lock:
            self._owner = task
            try:
                yield self.state
            finally:
                self._owner = None

    def holds_borrow(self) -> bool:
        return self._owner is not None and self._owner is asyncio.current_task()

    async def advance(self) -> Pair[T] | None:
        """Pull the next pair from upstream, or None once it is exhausted."""
        if not self.holds_borrow():
            raise ProtocolViolation("advance() called without borrowing the cursor")
        return self.state.record(await anext(self._pairs, None))
