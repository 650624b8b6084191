"""
Pytest fixtures для тестов.

Предоставляет:
- shared_folder: временная общая папка (как Dropbox/NFS между машинами)
- naming: соглашение об именах файлов логов
- make_service: фабрика TagService для нескольких хостов в одной папке
"""

import shutil
import tempfile
from pathlib import Path

import pytest

from src.integrations.workspace import HostIdentity, SharedFolder
from src.repositories import LogFileNaming
from src.services import TagService


@pytest.fixture
def shared_folder():
    """Создаёт временную общую папку."""
    folder = tempfile.mkdtemp(prefix="test_shared_")

    yield Path(folder)

    # Cleanup
    shutil.rmtree(folder, ignore_errors=True)


@pytest.fixture
def naming():
    """Стандартные имена логов: .tags.<host>.json"""
    return LogFileNaming(prefix=".tags.", suffix=".json")


@pytest.fixture
def make_service(shared_folder, naming):
    """
    Фабрика сервисов: каждый вызов - отдельный хост.

    Пример:
        laptop = make_service("laptop")
        desktop = make_service("desktop")
    """
    services: list[TagService] = []

    def _make(hostname: str = "laptop", folder: Path | None = None, file_source=None) -> TagService:
        service = TagService(
            shared_folder=SharedFolder(folder if folder is not None else shared_folder),
            host=HostIdentity(hostname),
            file_source=file_source,
            naming=naming,
        )
        services.append(service)
        return service

    yield _make

    for service in services:
        service.close()


@pytest.fixture
def tag_service(make_service):
    """TagService хоста "laptop"."""
    return make_service("laptop")
