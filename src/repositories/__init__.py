"""Repository layer: tag log storage and merging."""

from .log_merger import LogMerger
from .log_store import LogFileNaming, LogStore

__all__ = [
    "LogFileNaming",
    "LogStore",
    "LogMerger",
]
