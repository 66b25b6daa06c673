"""State transitions shared by the synchronous and asynchronous partitions."""

import logging
from collections.abc import Callable

from run_partition.cursor.state import CursorState
from run_partition.cursor.types import MISSING
from run_partition.errors import ProtocolViolation

logger = logging.getLogger(__name__)


def identity[T](item: T) -> T:
    """Default key function: every item is its own key."""
    return item


def ensure_usable(state: CursorState) -> None:
    """Refuse to continue a sequence that already raised ProtocolViolation."""
    if state.poisoned:
        raise ProtocolViolation("partition sequence already failed with a protocol violation")


def note_exhausted(state: CursorState) -> None:
    stats = state.stats
    logger.debug(
        "Upstream exhausted: %d items read into %d partitions",
        stats.items_read,
        stats.partitions_opened,
    )


def open_partition[T, K](state: CursorState[T, K], current: T, key_fn: Callable[[T], K]) -> K:
    """
    Claim `current` as the head of a new partition and return its key.

    A head whose key equals the previously emitted key means the previous
    partition was left with items: drained partitions always stop at a key
    change, so the two runs would otherwise be merged.
    """
    key = key_fn(current)
    last_key = state.last_emitted_key

    if last_key is not MISSING and last_key == key:
        state.poisoned = True
        logger.error(
            "Protocol violation: partition %d (key=%r) requested before the previous one was drained",
            state.generation + 1,
            key,
        )
        raise ProtocolViolation(
            f"next partition requested before partition with key {key!r} was drained"
        )

    state.last_emitted_key = key
    state.generation += 1
    state.stats.partitions_opened += 1
    state.stats.items_emitted += 1
    logger.debug("Opened partition %d (key=%r)", state.generation, key)
    return key


def run_continues[T, K](
    state: CursorState[T, K],
    generation: int,
    key: K,
    key_fn: Callable[[T], K],
) -> bool:
    """
    Decide whether the partition opened as `generation` has another item.

    A superseded partition never continues. Otherwise the run continues when
    the pending lookahead exists and shares the partition key; the boundary
    item is left pending for the next partition.
    """
    if state.generation != generation:
        return False

    pending = state.pending
    if pending is MISSING:
        return False
    return key_fn(pending) == key


def take_item[T](state: CursorState[T, object], pair: tuple[T, object] | None) -> T:
    """Hand the current item of a freshly pulled pair to the open partition."""
    if pair is None:
        # A pending item was observed, so upstream cannot be exhausted yet.
        raise ProtocolViolation("upstream ended while an item was pending")

    state.stats.items_emitted += 1
    return pair[0]
