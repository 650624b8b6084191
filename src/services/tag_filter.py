"""Show/hide tag filter for note lists."""

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..models import TagProjection


class FilterStatus(str, enum.Enum):
    """Filter status of one tag."""

    SHOW = "show"
    HIDE = "hide"
    NONE = "none"


@dataclass
class TagFilter:
    """
    Фильтр файлов по тегам.

    Правила:
    1. Ни один тег не выбран → файл виден
    2. У файла есть hide-тег → файл скрыт (hide приоритетнее show)
    3. Есть show-теги → файл виден только если у него есть хотя бы один из них
    """

    statuses: dict[str, FilterStatus] = field(default_factory=dict)

    def set_status(self, tag_id: str, status: FilterStatus | str) -> None:
        status = FilterStatus(status)
        if status == FilterStatus.NONE:
            self.statuses.pop(tag_id, None)
        else:
            self.statuses[tag_id] = status

    def clear(self) -> None:
        self.statuses.clear()

    def prune(self, existing_tag_ids: Iterable[str]) -> None:
        """Forget statuses of tags that no longer exist."""
        existing = set(existing_tag_ids)
        self.statuses = {k: v for k, v in self.statuses.items() if k in existing}

    @property
    def is_active(self) -> bool:
        return any(status != FilterStatus.NONE for status in self.statuses.values())

    def _ids(self, status: FilterStatus) -> set[str]:
        return {tag_id for tag_id, s in self.statuses.items() if s == status}

    def matches(self, file_tag_ids: Iterable[str]) -> bool:
        """Check whether a file with the given tag ids passes the filter."""
        show_ids = self._ids(FilterStatus.SHOW)
        hide_ids = self._ids(FilterStatus.HIDE)

        if not show_ids and not hide_ids:
            return True

        tag_ids = set(file_tag_ids)

        if hide_ids & tag_ids:
            return False

        if show_ids:
            return bool(show_ids & tag_ids)

        return True

    def apply(self, file_paths: Iterable[str], projection: TagProjection) -> list[str]:
        """Filter file paths against a projection, keeping input order."""
        by_file: dict[str, set[str]] = {}
        for ft in projection.file_tags:
            by_file.setdefault(ft.file_path, set()).add(ft.tag_id)

        return [path for path in file_paths if self.matches(by_file.get(path, ()))]
