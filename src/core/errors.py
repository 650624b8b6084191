"""
Исключения движка тегов.

Таксономия:
- StorageError: папка или файл лога недоступны (права, диск, путь пропал)
- MalformedLogError: файл лога есть, но разобрать его нельзя

Ссылки на несуществующий tag_id ошибкой не являются: проекция их молча
пропускает, потому что логи разных хостов приходят вне причинного порядка.
"""

from pathlib import Path


class TagEngineError(Exception):
    """
    Базовый класс для всех ошибок движка тегов.

    Использование:
        raise TagEngineError("Something went wrong", code="TAG_ENGINE_ERROR")
    """

    def __init__(
        self,
        message: str,
        code: str = "TAG_ENGINE_ERROR",
        details: list[dict] | None = None,
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)


class StorageError(TagEngineError):
    """
    Shared folder or a host log file cannot be read or written.

    Использование:
        raise StorageError("Cannot write tag log", path=log_path)
    """

    def __init__(self, message: str, path: str | Path | None = None):
        self.path = str(path) if path is not None else None
        super().__init__(
            message=message,
            code="STORAGE_ERROR",
            details=[{"path": self.path}] if self.path else None,
        )


class MalformedLogError(TagEngineError):
    """
    A host log file exists but cannot be parsed.

    Использование:
        raise MalformedLogError(log_path, "invalid JSON")
    """

    def __init__(self, path: str | Path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(
            message=f"Malformed tag log {self.path}: {reason}",
            code="MALFORMED_LOG",
            details=[{"path": self.path, "reason": reason}],
        )
