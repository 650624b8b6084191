"""Durable storage of one host's tag log file."""

import contextlib
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

from pydantic import ValidationError

from ..core.config import settings
from ..core.errors import MalformedLogError, StorageError
from ..core.logging import get_logger
from ..models import LOG_FORMAT_VERSION, HostLog

logger = get_logger(__name__)


@dataclass(frozen=True)
class LogFileNaming:
    """Per-host log file naming convention: <prefix><host><suffix>."""

    prefix: str = ".tags."
    suffix: str = ".json"

    @classmethod
    def from_settings(cls) -> "LogFileNaming":
        return cls(prefix=settings.TAG_LOG_PREFIX, suffix=settings.TAG_LOG_SUFFIX)

    def file_name(self, hostname: str) -> str:
        """
        Build a deterministic file name for a host.

        Percent-encoding keeps the mapping injective: different host names
        never share a file.

        Примеры:
            "laptop" → ".tags.laptop.json"
            "Mac Book/Pro" → ".tags.Mac%20Book%2FPro.json"
        """
        return f"{self.prefix}{quote(hostname, safe='')}{self.suffix}"

    @property
    def glob_pattern(self) -> str:
        return f"{self.prefix}*{self.suffix}"


class LogStore:
    """
    Reads and writes exactly one host's log file.

    Никакой бизнес-логики: только (де)сериализация и атомарная запись.
    """

    def __init__(self, folder: str | Path, hostname: str, naming: LogFileNaming | None = None):
        """Initialize store.

        Args:
            folder: Shared folder holding every host's log
            hostname: Identity of the owning host
            naming: File naming convention (defaults to settings)
        """
        self.folder = Path(folder)
        self.hostname = hostname
        self.naming = naming or LogFileNaming.from_settings()
        self.path = self.folder / self.naming.file_name(hostname)

    def load(self) -> HostLog:
        """Load this host's log.

        Returns:
            HostLog (empty if the file does not exist yet)

        Raises:
            StorageError: If the file exists but cannot be read
            MalformedLogError: If the file cannot be parsed or belongs to another host
        """
        if not self.path.exists():
            return HostLog(hostname=self.hostname)

        host_log = self.read_path(self.path)
        if host_log.hostname != self.hostname:
            raise MalformedLogError(
                self.path, f"log belongs to host {host_log.hostname!r}, not {self.hostname!r}"
            )
        return host_log

    def save(self, host_log: HostLog) -> None:
        """Overwrite the log file atomically.

        Пишем во временный файл рядом и делаем os.replace: при падении
        посреди записи старый файл остаётся целым.

        Raises:
            StorageError: If the folder is not writable
        """
        if not self.folder.is_dir():
            raise StorageError(f"Shared folder is not available: {self.folder}", path=self.folder)

        payload = host_log.to_json()
        tmp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.folder,
                prefix=f"{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise StorageError(f"Cannot write tag log {self.path}: {e}", path=self.path) from e

        logger.debug(
            "Tag log saved",
            extra={
                "path": str(self.path),
                "tag_entries": len(host_log.tag_logs),
                "file_tag_entries": len(host_log.file_tag_logs),
            },
        )

    @staticmethod
    def read_path(path: str | Path) -> HostLog:
        """Read and parse any host's log file.

        Args:
            path: Path to a host log file

        Returns:
            Parsed HostLog

        Raises:
            StorageError: If the file cannot be read
            MalformedLogError: If the content is not a valid host log
        """
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            raise StorageError(f"Cannot read tag log {path}: {e}", path=path) from e
        except UnicodeDecodeError as e:
            raise MalformedLogError(path, f"not UTF-8: {e}") from e

        try:
            host_log = HostLog.model_validate_json(raw)
        except ValidationError as e:
            raise MalformedLogError(path, f"{e.error_count()} validation error(s)") from e

        if host_log.version > LOG_FORMAT_VERSION:
            raise MalformedLogError(path, f"unsupported format version {host_log.version}")

        return host_log
