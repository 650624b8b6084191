"""Append-only log entry models and the per-host log document."""

import enum
from datetime import datetime

from pydantic import Field, field_validator

from .base import Base, ensure_utc

# Version of the on-disk host log format
LOG_FORMAT_VERSION = 1


class TagAction(str, enum.Enum):
    """Kind of tag change."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class FileTagAction(str, enum.Enum):
    """Kind of file-tag change."""

    ADD = "add"
    REMOVE = "remove"


class TagData(Base):
    """Tag fields carried by create/update entries. None means "not present"."""

    name: str | None = None
    color: str | None = None
    order: int | None = None

    def present_fields(self) -> dict:
        return self.model_dump(exclude_none=True)


class LogEntry(Base):
    """
    Common part of every log entry.

    id = "<hostname>:<seq>" - каноническая идентичность записи, по ней идёт
    дедупликация. Записи старого формата id не имеют (seq = 0).
    """

    id: str | None = None
    seq: int = 0
    timestamp: datetime
    hostname: str

    @field_validator("timestamp")
    @classmethod
    def _timestamp_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def sort_key(self) -> tuple[datetime, str, int]:
        """Total replay ordering: timestamp, then host, then per-host sequence."""
        return (self.timestamp, self.hostname, self.seq)


class TagLogEntry(LogEntry):
    """create / update / delete of a tag."""

    action: TagAction
    tag_id: str
    data: TagData = Field(default_factory=TagData)

    @property
    def dedup_key(self) -> tuple:
        if self.id:
            return ("id", self.id)
        return (self.timestamp, self.hostname, self.action.value, self.tag_id)


class FileTagLogEntry(LogEntry):
    """add / remove of a file-tag association."""

    action: FileTagAction
    file_path: str
    tag_id: str

    @property
    def dedup_key(self) -> tuple:
        if self.id:
            return ("id", self.id)
        return (self.timestamp, self.hostname, self.action.value, self.file_path, self.tag_id)


class HostLog(Base):
    """
    Everything one host has ever appended.

    Формат файла:
    {
        "version": 1,
        "hostname": "laptop",
        "tagLogs": [...],
        "fileTagLogs": [...]
    }
    """

    version: int = LOG_FORMAT_VERSION
    hostname: str
    tag_logs: list[TagLogEntry] = Field(default_factory=list)
    file_tag_logs: list[FileTagLogEntry] = Field(default_factory=list)

    @property
    def last_seq(self) -> int:
        entries: list[LogEntry] = [*self.tag_logs, *self.file_tag_logs]
        return max((entry.seq for entry in entries), default=0)

    @property
    def last_timestamp(self) -> datetime | None:
        entries: list[LogEntry] = [*self.tag_logs, *self.file_tag_logs]
        return max((entry.timestamp for entry in entries), default=None)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)


class MergedLogs(Base):
    """Deduplicated entries from every host log found in a shared folder."""

    tag_logs: list[TagLogEntry] = Field(default_factory=list)
    file_tag_logs: list[FileTagLogEntry] = Field(default_factory=list)
    hosts: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
