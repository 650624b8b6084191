"""Base classes for tag engine models."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive timestamps (older logs) as UTC so that all entries compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class Base(BaseModel):
    """
    Base class for all models.

    Python атрибуты в snake_case, JSON на диске в camelCase
    (tagId, filePath, createdAt) - так файлы писало исходное приложение.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
