"""Projection of merged tag logs into the current tag state.

Replay algorithm:
1. Tag entries are ordered by (timestamp, hostname, seq)
2. create / update / delete are applied to a tag map
3. File-tag entries are ordered the same way
4. add / remove are applied against the FINAL tag map
5. Tags are sorted by order for presentation
"""

from ..core.logging import get_logger
from ..models import (
    FileTagAction,
    FileTagAssociation,
    FileTagLogEntry,
    MergedLogs,
    Tag,
    TagAction,
    TagLogEntry,
    TagProjection,
)

logger = get_logger(__name__)


class ProjectionEngine:
    """Deterministic, side-effect free replay of merged logs."""

    def project(self, merged: MergedLogs) -> TagProjection:
        """Replay merged logs.

        Args:
            merged: Deduplicated entries from all hosts

        Returns:
            TagProjection with tags sorted by order

        Одинаковый вход всегда даёт одинаковый результат: порядок обнаружения
        файлов не важен, потому что записи сортируются перед применением.
        """
        tags = self._replay_tags(merged.tag_logs)
        file_tags = self._replay_file_tags(merged.file_tag_logs, tags)

        # sorted() is stable: equal orders keep creation order
        sorted_tags = sorted(tags.values(), key=lambda t: t.order)

        logger.debug(
            "Tag state projected",
            extra={"tags": len(sorted_tags), "file_tags": len(file_tags)},
        )

        return TagProjection(tags=sorted_tags, file_tags=list(file_tags.values()))

    def _replay_tags(self, entries: list[TagLogEntry]) -> dict[str, Tag]:
        tags: dict[str, Tag] = {}

        for entry in sorted(entries, key=lambda e: e.sort_key):
            if entry.action == TagAction.CREATE:
                # Ids are never reused, a second create is a duplicate
                if entry.tag_id in tags:
                    continue
                data = entry.data
                tags[entry.tag_id] = Tag(
                    id=entry.tag_id,
                    name=data.name or "",
                    color=data.color or "",
                    order=data.order if data.order is not None else len(tags),
                    created_at=entry.timestamp,
                    updated_at=entry.timestamp,
                )

            elif entry.action == TagAction.UPDATE:
                # Unknown id: the create may not be visible yet (clock skew)
                tag = tags.get(entry.tag_id)
                if tag is None:
                    continue
                tags[entry.tag_id] = tag.model_copy(
                    update={**entry.data.present_fields(), "updated_at": entry.timestamp}
                )

            elif entry.action == TagAction.DELETE:
                tags.pop(entry.tag_id, None)

        return tags

    def _replay_file_tags(
        self, entries: list[FileTagLogEntry], tags: dict[str, Tag]
    ) -> dict[tuple[str, str], FileTagAssociation]:
        file_tags: dict[tuple[str, str], FileTagAssociation] = {}

        for entry in sorted(entries, key=lambda e: e.sort_key):
            key = (entry.file_path, entry.tag_id)

            if entry.action == FileTagAction.ADD:
                # Checked against the final tag map, not a point-in-time one
                if entry.tag_id not in tags or key in file_tags:
                    continue
                file_tags[key] = FileTagAssociation(
                    file_path=entry.file_path,
                    tag_id=entry.tag_id,
                    created_at=entry.timestamp,
                )

            elif entry.action == FileTagAction.REMOVE:
                file_tags.pop(key, None)

        return file_tags
