"""The single mutable slot shared by a partition sequence and its partitions."""

from dataclasses import dataclass, field

from run_partition.cursor.types import MISSING, CursorStats, Missing, Pair


@dataclass
class CursorState[T, K]:
    """
    Bookkeeping behind a cursor.

    `pending` is the lookahead of the most recently pulled pair. It is the
    only copy of the next upstream item: the open partition reads it to
    decide whether its run continues, and the following pull hands the same
    item out as `current`.
    """

    pending: T | Missing = MISSING
    last_emitted_key: K | Missing = MISSING
    generation: int = 0
    exhausted: bool = False
    poisoned: bool = False
    stats: CursorStats = field(default_factory=CursorStats)

    def record(self, pair: Pair[T] | None) -> Pair[T] | None:
        """Store the outcome of one upstream pull and pass it through."""
        if pair is None:
            self.exhausted = True
            self.pending = MISSING
            return None

        self.stats.items_read += 1
        self.pending = pair[1]
        return pair
