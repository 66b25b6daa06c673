"""Lazy partitioning of an async iterable, for cooperative schedulers."""

from collections.abc import AsyncIterable, AsyncIterator, Callable

from run_partition.cursor.cursor import AsyncLockedCursor
from run_partition.cursor.types import MISSING, CursorStats, Missing
from run_partition.runs.transitions import (
    ensure_usable,
    identity,
    note_exhausted,
    open_partition,
    run_continues,
    take_item,
)


class AsyncPartition[T, K]:
    """
    One run of consecutive items sharing `key`, pulled with await.

    Same contract as Partition, including the unread-first-item exception
    to the drained-before-next check.
    """

    def __init__(
        self,
        cursor: AsyncLockedCursor[T],
        key_fn: Callable[[T], K],
        key: K,
        generation: int,
        head: T,
    ):
        self.key = key
        self._cursor = cursor
        self._key_fn = key_fn
        self._generation = generation
        self._head: T | Missing = head
        self._terminated = False

    @property
    def terminated(self) -> bool:
        return self._terminated

    async def next_item[D](self, default: D = None) -> T | D:
        """Return the next item of the run, or `default` once it has ended."""
        if self._terminated:
            return default

        if self._head is not MISSING:
            head, self._head = self._head, MISSING
            return head

        async with self._cursor.borrow() as state:
            if not run_continues(state, self._generation, self.key, self._key_fn):
                self._terminated = True
                return default
            return take_item(state, await self._cursor.advance())

    async def drain(self) -> list[T]:
        """Consume and return the remaining items."""
        return [item async for item in self]

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        item = await self.next_item(MISSING)
        if item is MISSING:
            raise StopAsyncIteration
        return item

    def __repr__(self) -> str:
        state = "terminated" if self._terminated else "active"
        return f"<AsyncPartition key={self.key!r} {state}>"


class AsyncPartitionSequence[T, K]:
    """Outer async sequence yielding one AsyncPartition per run."""

    def __init__(self, cursor: AsyncLockedCursor[T], key_fn: Callable[[T], K]):
        self._cursor = cursor
        self._key_fn = key_fn

    @property
    def stats(self) -> CursorStats:
        return self._cursor.state.stats

    async def next_partition(self) -> AsyncPartition[T, K] | None:
        """
        Open the next partition, or return None once upstream is exhausted.

        Raises ProtocolViolation when the previous partition still had items.
        """
        async with self._cursor.borrow() as state:
            ensure_usable(state)
            if state.exhausted:
                return None

            pair = await self._cursor.advance()
            if pair is None:
                note_exhausted(state)
                return None

            current, _ = pair
            key = open_partition(state, current, self._key_fn)
            return AsyncPartition(self._cursor, self._key_fn, key, state.generation, current)

    def __aiter__(self) -> AsyncIterator[AsyncPartition[T, K]]:
        return self

    async def __anext__(self) -> AsyncPartition[T, K]:
        partition = await self.next_partition()
        if partition is None:
            raise StopAsyncIteration
        return partition


def apartition_by[T, K](
    aiterable: AsyncIterable[T],
    key_fn: Callable[[T], K] | None = None,
) -> AsyncPartitionSequence[T, K]:
    """Split an async iterable into partitions of consecutive equal-key items."""
    return AsyncPartitionSequence(AsyncLockedCursor(aiterable), key_fn or identity)
