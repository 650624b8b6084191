"""Core application components."""

from .config import Settings, settings
from .errors import MalformedLogError, StorageError, TagEngineError

__all__ = [
    "settings",
    "Settings",
    "TagEngineError",
    "StorageError",
    "MalformedLogError",
]
