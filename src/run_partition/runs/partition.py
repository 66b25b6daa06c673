"""Lazy partitioning of an iterable into runs of equal keys."""

import logging
from collections.abc import Callable, Iterable, Iterator

from run_partition.cursor.cursor import ExclusiveCursor
from run_partition.cursor.policy import EXCLUSIVE_POLICY, describe_cursor, get_cursor_class
from run_partition.cursor.types import MISSING, CursorStats, Missing
from run_partition.runs.transitions import (
    ensure_usable,
    identity,
    note_exhausted,
    open_partition,
    run_continues,
    take_item,
)

logger = logging.getLogger(__name__)


class Partition[T, K]:
    """
    One maximal run of consecutive items sharing `key`.

    Items are pulled lazily from the shared cursor. The partition must be
    drained before the next one is requested from its PartitionSequence.
    A partition whose only remaining item is its unread first item is not
    reported when the next one is requested; that item is still returned.
    """

    def __init__(
        self,
        cursor: ExclusiveCursor[T],
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

    def next_item[D](self, default: D = None) -> T | D:
        """Return the next item of the run, or `default` once it has ended."""
        if self._terminated:
            return default

        if self._head is not MISSING:
            head, self._head = self._head, MISSING
            return head

        with self._cursor.borrow() as state:
            if not run_continues(state, self._generation, self.key, self._key_fn):
                self._terminated = True
                return default
            return take_item(state, self._cursor.advance())

    def drain(self) -> list[T]:
        """Consume and return the remaining items."""
        return list(self)

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        item = self.next_item(MISSING)
        if item is MISSING:
            raise StopIteration
        return item

    def __repr__(self) -> str:
        state = "terminated" if self._terminated else "active"
        return f"<Partition key={self.key!r} {state}>"


class PartitionSequence[T, K]:
    """Outer lazy sequence yielding one Partition per run."""

    def __init__(self, cursor: ExclusiveCursor[T], key_fn: Callable[[T], K]):
        self._cursor = cursor
        self._key_fn = key_fn

    @property
    def stats(self) -> CursorStats:
        return self._cursor.state.stats

    def next_partition(self) -> Partition[T, K] | None:
        """
        Open the next partition, or return None once upstream is exhausted.

        Raises ProtocolViolation when the previous partition still had items.
        """
        with self._cursor.borrow() as state:
            ensure_usable(state)
            if state.exhausted:
                return None

            pair = self._cursor.advance()
            if pair is None:
                note_exhausted(state)
                return None

            current, _ = pair
            key = open_partition(state, current, self._key_fn)
            return Partition(self._cursor, self._key_fn, key, state.generation, current)

    def __iter__(self) -> Iterator[Partition[T, K]]:
        return self

    def __next__(self) -> Partition[T, K]:
        partition = self.next_partition()
        if partition is None:
            raise StopIteration
        return partition


def partition_by[T, K](
    iterable: Iterable[T],
    key_fn: Callable[[T], K] | None = None,
    *,
    policy: str = EXCLUSIVE_POLICY,
) -> PartitionSequence[T, K]:
    """
    Split `iterable` into partitions of consecutive items with equal keys.

    Nothing is pulled from `iterable` until the first partition is requested.
    Use policy="locked" when partitions are consumed from other threads.
    """
    cursor_class = get_cursor_class(policy)
    logger.debug("Partitioning with %s cursor", describe_cursor(cursor_class))
    return PartitionSequence(cursor_class(iterable), key_fn or identity)
