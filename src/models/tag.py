"""Tag, file-tag association and projection models."""

import random
from datetime import datetime

from pydantic import Field

from .base import Base

# Fixed palette offered by the editor's tag dialogs
TAG_COLOR_PALETTE: tuple[str, ...] = (
    "#e53935",  # red
    "#d81b60",  # pink
    "#8e24aa",  # purple
    "#5e35b1",  # deep purple
    "#3949ab",  # indigo
    "#1e88e5",  # blue
    "#039be5",  # light blue
    "#00acc1",  # cyan
    "#00897b",  # teal
    "#43a047",  # green
    "#7cb342",  # light green
    "#c0ca33",  # lime
    "#fdd835",  # yellow
    "#ffb300",  # amber
    "#fb8c00",  # orange
    "#6d4c41",  # brown
)


def random_tag_color() -> str:
    """Pick a random color from the palette."""
    return random.choice(TAG_COLOR_PALETTE)


class Tag(Base):
    """A named, colored, orderable label."""

    id: str
    name: str
    color: str
    order: int = 0
    created_at: datetime
    updated_at: datetime

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}', order={self.order})>"


class FileTagAssociation(Base):
    """Edge between a note file (relative path) and a tag id."""

    file_path: str
    tag_id: str
    created_at: datetime

    @property
    def key(self) -> tuple[str, str]:
        return (self.file_path, self.tag_id)


class TagProjection(Base):
    """
    Materialized tag state.

    tags отсортированы по order, file_tags - без гарантированного порядка.
    """

    tags: list[Tag] = Field(default_factory=list)
    file_tags: list[FileTagAssociation] = Field(default_factory=list)

    def get_tag(self, tag_id: str) -> Tag | None:
        return next((tag for tag in self.tags if tag.id == tag_id), None)

    def tags_for_file(self, file_path: str) -> list[Tag]:
        """Tags assigned to a file, in display order."""
        tag_ids = {ft.tag_id for ft in self.file_tags if ft.file_path == file_path}
        return [tag for tag in self.tags if tag.id in tag_ids]

    def files_for_tag(self, tag_id: str) -> list[str]:
        return sorted(ft.file_path for ft in self.file_tags if ft.tag_id == tag_id)
