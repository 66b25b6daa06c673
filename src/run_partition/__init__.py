"""Run Partition - split ordered sequences into runs of items sharing a key."""

from run_partition.cursor.types import CursorStats
from run_partition.errors import ProtocolViolation
from run_partition.runs.async_partition import (
    AsyncPartition,
    AsyncPartitionSequence,
    apartition_by,
)
from run_partition.runs.partition import Partition, PartitionSequence, partition_by

__all__ = [
    "AsyncPartition",
    "AsyncPartitionSequence",
    "CursorStats",
    "Partition",
    "PartitionSequence",
    "ProtocolViolation",
    "apartition_by",
    "partition_by",
]
