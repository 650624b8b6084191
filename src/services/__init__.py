"""Service layer with business logic."""

from .projection import ProjectionEngine
from .tag import CacheState, ProjectionCache, TagService
from .tag_filter import FilterStatus, TagFilter

__all__ = [
    "ProjectionEngine",
    "TagService",
    "CacheState",
    "ProjectionCache",
    "TagFilter",
    "FilterStatus",
]
