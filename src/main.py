"""
Точка входа движка тегов.

Редактор создаёт один TagService на рабочую папку:

    from src.main import create_tag_service

    service = create_tag_service("/mnt/notes")
    tag_id = await service.create_tag("Work", "#e53935")
    await service.add_file_tag("notes/a.md", tag_id)
    await service.get_file_tags("notes/a.md")

Смена рабочей папки: service.shared_folder.set_path(...) - кэш сбросится сам.
"""

from pathlib import Path

from .core.config import settings
from .core.logging import get_logger, setup_logging
from .integrations.workspace import HostIdentity, NoteScanner, SharedFolder
from .repositories import LogFileNaming
from .services import TagService

logger = get_logger(__name__)


class _FolderNoteSource:
    """Lists notes of whatever folder is currently shared."""

    def __init__(self, shared_folder: SharedFolder):
        self.shared_folder = shared_folder

    def list_file_paths(self) -> list[str]:
        path = self.shared_folder.path
        if path is None:
            return []
        try:
            scanner = NoteScanner(path)
        except ValueError as e:
            logger.warning("Shared folder unavailable, no notes listed", extra={"reason": str(e)})
            return []
        return scanner.list_file_paths()


def create_tag_service(
    shared_folder: str | Path | None = None,
    hostname: str | None = None,
    configure_logging: bool = True,
) -> TagService:
    """
    Build a TagService from settings.

    Args:
        shared_folder: Shared folder (default: SHARED_FOLDER setting)
        hostname: Host identity (default: HOST_NAME setting)
        configure_logging: Install the LOG_LEVEL / LOG_FORMAT handlers

    Returns:
        Ready-to-use TagService in the UNLOADED state
    """
    if configure_logging:
        setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)

    folder = SharedFolder(shared_folder)
    host = HostIdentity(hostname)
    service = TagService(
        shared_folder=folder,
        host=host,
        file_source=_FolderNoteSource(folder),
        naming=LogFileNaming.from_settings(),
    )

    logger.info(
        "Tag service created",
        extra={
            "app_name": settings.APP_NAME,
            "hostname": host.hostname,
            "shared_folder": str(folder.path),
        },
    )
    return service
