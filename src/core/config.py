"""Application configuration."""

import socket
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the path to config/.env (relative to this file)
# This file is at: src/core/config.py
# .env is at: config/.env
BASE_DIR = Path(__file__).resolve().parent.parent.parent  # Go up to project root
ENV_FILE = BASE_DIR / "config" / ".env"


class Settings(BaseSettings):
    """
    Settings of the tag engine loaded from environment variables.

    Все настройки можно переопределить через переменные окружения.
    Пример: SHARED_FOLDER=/mnt/notes HOST_NAME=laptop python -m ...
    """

    APP_NAME: str = "Note Tag Sync"

    # =========================================================================
    # Shared folder
    # =========================================================================
    # SHARED_FOLDER - папка с заметками, общая для всех машин (Dropbox, NFS, ...)
    # В ней же лежат логи тегов каждого хоста
    SHARED_FOLDER: str | None = None

    # HOST_NAME - стабильное имя "этой машины"
    # Из него строится имя файла лога и поле hostname каждой записи
    HOST_NAME: str = Field(default_factory=socket.gethostname)

    # TAG_LOG_PREFIX / TAG_LOG_SUFFIX - имя файла лога: <prefix><host><suffix>
    # Пример: .tags.laptop.json
    TAG_LOG_PREFIX: str = ".tags."
    TAG_LOG_SUFFIX: str = ".json"

    # =========================================================================
    # Logging
    # =========================================================================
    # LOG_LEVEL - уровень логирования: DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_LEVEL: str = "INFO"

    # LOG_FORMAT - формат логов:
    # "json" - структурированный JSON
    # "simple" - человекочитаемый текст (для разработки)
    LOG_FORMAT: str = "json"

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE), env_file_encoding="utf-8", case_sensitive=True
    )


# Create global settings instance
settings = Settings()
