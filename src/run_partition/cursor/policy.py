"""Cursor policy selection for synchronous partitioning."""

from run_partition.cursor.cursor import ExclusiveCursor, LockedCursor

type CursorClass = type[ExclusiveCursor] | type[LockedCursor]

EXCLUSIVE_POLICY = "exclusive"
LOCKED_POLICY = "locked"


def get_cursor_class(policy: str = EXCLUSIVE_POLICY) -> CursorClass:
    """
    Select the cursor class for a synchronisation policy.

    "exclusive" is for one sequential caller and only checks for re-entrant
    access. "locked" puts the cursor behind a lock so partitions can be
    handed to worker threads.
    """
    normalized = policy.lower()

    if normalized == EXCLUSIVE_POLICY:
        return ExclusiveCursor
    if normalized == LOCKED_POLICY:
        return LockedCursor

    raise ValueError(
        f"policy must be {EXCLUSIVE_POLICY!r} or {LOCKED_POLICY!r}, got {policy!r}"
    )


def describe_cursor(cursor_class: CursorClass) -> str:
    """Convert a cursor class into a readable policy name."""
    if issubclass(cursor_class, LockedCursor):
        return LOCKED_POLICY
    return EXCLUSIVE_POLICY
