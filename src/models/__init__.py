"""Pydantic models for the tag engine."""

from .base import Base, utc_now
from .log_entry import (
    LOG_FORMAT_VERSION,
    FileTagAction,
    FileTagLogEntry,
    HostLog,
    MergedLogs,
    TagAction,
    TagData,
    TagLogEntry,
)
from .tag import TAG_COLOR_PALETTE, FileTagAssociation, Tag, TagProjection, random_tag_color

__all__ = [
    "Base",
    "utc_now",
    "Tag",
    "FileTagAssociation",
    "TagProjection",
    "TAG_COLOR_PALETTE",
    "random_tag_color",
    "LOG_FORMAT_VERSION",
    "TagAction",
    "FileTagAction",
    "TagData",
    "TagLogEntry",
    "FileTagLogEntry",
    "HostLog",
    "MergedLogs",
]
