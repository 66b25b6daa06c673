"""Shared sentinel, pair alias and counters for the cursor layer."""

from dataclasses import dataclass
from enum import Enum
from typing import Final, Literal


class _Missing(Enum):
    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"


# Marks "no item" where None could be a legitimate item.
MISSING: Final = _Missing.MISSING

type Missing = Literal[_Missing.MISSING]
type Pair[T] = tuple[T, T | Missing]


@dataclass
class CursorStats:
    """Counters kept by a cursor while partitioning."""

    items_read: int = 0
    partitions_opened: int = 0
    items_emitted: int = 0
