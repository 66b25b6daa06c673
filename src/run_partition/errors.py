"""Error raised when the partitioning contract is broken."""


class ProtocolViolation(RuntimeError):
    """
    Raised when partitions are consumed out of order.

    The usual cause is requesting the next partition while the previous one
    still had items of the same key. Re-entrant access to a cursor and reuse
    of a sequence that already failed raise it too. It is not recoverable:
    the sequence that raised it cannot be resumed.
    """
