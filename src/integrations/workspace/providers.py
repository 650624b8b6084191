"""Collaborators the tag engine depends on but does not own."""

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from ...core.config import settings
from ...core.logging import get_logger

logger = get_logger(__name__)


class FileIdentifierSource(Protocol):
    """Anything that can list note file identifiers (relative paths)."""

    def list_file_paths(self) -> list[str]: ...


class HostIdentity:
    """Stable identity of this machine."""

    def __init__(self, hostname: str | None = None):
        name = (hostname or settings.HOST_NAME).strip()
        if not name:
            raise ValueError("Host name cannot be empty")
        self.hostname = name

    def __str__(self) -> str:
        return self.hostname


class SharedFolder:
    """
    Current shared folder of the workspace.

    Слушатели вызываются при смене папки - TagService подписывается и
    сбрасывает кэш проекции.
    """

    def __init__(self, path: str | Path | None = None):
        value = path if path is not None else settings.SHARED_FOLDER
        self._path: Path | None = Path(value) if value else None
        self._listeners: list[Callable[[Path | None], None]] = []

    @property
    def path(self) -> Path | None:
        return self._path

    def add_listener(self, listener: Callable[[Path | None], None]) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[Path | None], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def set_path(self, path: str | Path | None) -> bool:
        """Change the shared folder.

        Returns:
            True if the folder actually changed
        """
        new_path = Path(path) if path else None
        if new_path == self._path:
            return False

        logger.info(
            "Shared folder changed",
            extra={"old_path": str(self._path), "new_path": str(new_path)},
        )
        self._path = new_path
        for listener in list(self._listeners):
            listener(new_path)
        return True
