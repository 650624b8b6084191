"""Merges every host's tag log found in a shared folder."""

from pathlib import Path

from ..core.errors import MalformedLogError, StorageError
from ..core.logging import get_logger
from ..models import FileTagLogEntry, HostLog, MergedLogs, TagLogEntry
from .log_store import LogFileNaming, LogStore

logger = get_logger(__name__)


class LogMerger:
    """Discovers host logs, concatenates them and drops duplicate entries."""

    def __init__(self, naming: LogFileNaming | None = None):
        self.naming = naming or LogFileNaming.from_settings()

    def discover(self, folder: str | Path) -> list[Path]:
        """Find host log files in a folder.

        Args:
            folder: Shared folder

        Returns:
            Sorted list of log file paths

        Raises:
            StorageError: If the folder is missing or cannot be listed
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise StorageError(f"Shared folder is not available: {folder}", path=folder)

        try:
            paths = [p for p in folder.glob(self.naming.glob_pattern) if p.is_file()]
        except OSError as e:
            raise StorageError(f"Cannot list shared folder {folder}: {e}", path=folder) from e

        return sorted(paths)

    def merge_all(self, folder: str | Path, local: HostLog | None = None) -> MergedLogs:
        """Merge all host logs in a folder.

        Args:
            folder: Shared folder to scan
            local: In-memory log of this host (may contain entries not saved yet)

        Returns:
            MergedLogs with deduplicated entries (empty if no logs exist)

        Raises:
            StorageError: If the folder itself is unavailable

        Битый лог соседа не блокирует остальных: он пропускается с warning.
        """
        host_logs: list[HostLog] = []
        skipped: list[str] = []

        if local is not None:
            host_logs.append(local)

        for path in self.discover(folder):
            try:
                host_logs.append(LogStore.read_path(path))
            except (MalformedLogError, StorageError) as e:
                logger.warning(
                    "Skipping unreadable tag log",
                    extra={"path": str(path), "error_code": e.code, "reason": e.message},
                )
                skipped.append(str(path))

        merged = self.merge(host_logs)
        merged.skipped = skipped
        return merged

    def merge(self, host_logs: list[HostLog]) -> MergedLogs:
        """Concatenate host logs, keeping the first occurrence of each entry."""
        tag_logs: list[TagLogEntry] = []
        file_tag_logs: list[FileTagLogEntry] = []
        seen_tag: set[tuple] = set()
        seen_file_tag: set[tuple] = set()
        hosts: list[str] = []

        for host_log in host_logs:
            if host_log.hostname not in hosts:
                hosts.append(host_log.hostname)

            for entry in host_log.tag_logs:
                key = entry.dedup_key
                if key in seen_tag:
                    continue
                seen_tag.add(key)
                tag_logs.append(entry)

            for entry in host_log.file_tag_logs:
                key = entry.dedup_key
                if key in seen_file_tag:
                    continue
                seen_file_tag.add(key)
                file_tag_logs.append(entry)

        logger.debug(
            "Tag logs merged",
            extra={
                "hosts": len(hosts),
                "tag_entries": len(tag_logs),
                "file_tag_entries": len(file_tag_logs),
            },
        )

        return MergedLogs(tag_logs=tag_logs, file_tag_logs=file_tag_logs, hosts=hosts)
