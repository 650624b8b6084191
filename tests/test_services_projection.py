"""
Тесты для ProjectionEngine — пересчёт состояния из логов.

Покрывает:
- create / update / delete тегов
- add / remove связей файл-тег
- порядок применения: (timestamp, hostname, seq)
- проверку связей по ИТОГОВОМУ набору тегов
- идемпотентность и коммутативность слияния
"""

from datetime import UTC, datetime, timedelta

import pytest

from src.models import (
    FileTagAction,
    FileTagLogEntry,
    HostLog,
    MergedLogs,
    TagAction,
    TagData,
    TagLogEntry,
)
from src.repositories import LogMerger
from src.services import ProjectionEngine

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


def at(seconds: int) -> datetime:
    return T0 + timedelta(seconds=seconds)


def tag_entry(host, seq, action, tag_id, ts=None, **data):
    return TagLogEntry(
        id=f"{host}:{seq}",
        seq=seq,
        timestamp=ts if ts is not None else at(seq),
        hostname=host,
        action=action,
        tag_id=tag_id,
        data=TagData(**data),
    )


def file_entry(host, seq, action, file_path, tag_id, ts=None):
    return FileTagLogEntry(
        id=f"{host}:{seq}",
        seq=seq,
        timestamp=ts if ts is not None else at(seq),
        hostname=host,
        action=action,
        file_path=file_path,
        tag_id=tag_id,
    )


@pytest.fixture
def engine():
    """Создаёт ProjectionEngine."""
    return ProjectionEngine()


# =============================================================================
# ТЕСТЫ: теги
# =============================================================================


class TestTagReplay:
    """Тесты применения записей тегов."""

    def test_empty_logs(self, engine):
        projection = engine.project(MergedLogs())

        assert projection.tags == []
        assert projection.file_tags == []

    def test_create(self, engine):
        merged = MergedLogs(
            tag_logs=[
                tag_entry("laptop", 1, TagAction.CREATE, "t1", name="Work", color="#e53935", order=3)
            ]
        )

        tag = engine.project(merged).tags[0]

        assert tag.id == "t1"
        assert tag.name == "Work"
        assert tag.color == "#e53935"
        assert tag.order == 3
        assert tag.created_at == at(1)
        assert tag.updated_at == at(1)

    def test_create_without_order_uses_tag_count(self, engine):
        merged = MergedLogs(
            tag_logs=[
                tag_entry("laptop", 1, TagAction.CREATE, "t1", name="A"),
                tag_entry("laptop", 2, TagAction.CREATE, "t2", name="B"),
            ]
        )

        tags = engine.project(merged).tags

        assert [(t.id, t.order) for t in tags] == [("t1", 0), ("t2", 1)]

    def test_partial_update_keeps_other_fields(self, engine):
        """update меняет только переданные поля."""
        merged = MergedLogs(
            tag_logs=[
                tag_entry("laptop", 1, TagAction.CREATE, "t2", name="Idea", color="#039be5", order=0),
                tag_entry("laptop", 2, TagAction.UPDATE, "t2", color="#fdd835"),
            ]
        )

        tag = engine.project(merged).tags[0]

        assert tag.name == "Idea"
        assert tag.color == "#fdd835"
        assert tag.order == 0
        assert tag.created_at == at(1)
        assert tag.updated_at == at(2)

    def test_update_unknown_tag_is_ignored(self, engine):
        merged = MergedLogs(tag_logs=[tag_entry("laptop", 1, TagAction.UPDATE, "ghost", name="X")])

        assert engine.project(merged).tags == []

    def test_update_before_create_is_dropped(self, engine):
        """Из-за рассинхронизации часов update раньше create - молча теряется."""
        merged = MergedLogs(
            tag_logs=[
                tag_entry("desktop", 1, TagAction.UPDATE, "t1", name="Renamed", ts=at(1)),
                tag_entry("laptop", 1, TagAction.CREATE, "t1", name="Work", ts=at(5)),
            ]
        )

        assert engine.project(merged).tags[0].name == "Work"

    def test_delete(self, engine):
        merged = MergedLogs(
            tag_logs=[
                tag_entry("laptop", 1, TagAction.CREATE, "t1", name="Work"),
                tag_entry("laptop", 2, TagAction.DELETE, "t1"),
            ]
        )

        assert engine.project(merged).tags == []

    def test_delete_unknown_tag_is_ignored(self, engine):
        merged = MergedLogs(tag_logs=[tag_entry("laptop", 1, TagAction.DELETE, "ghost")])

        assert engine.project(merged).tags == []

    def test_duplicate_create_is_ignored(self, engine):
        merged = MergedLogs(
            tag_logs=[
                tag_entry("laptop", 1, TagAction.CREATE, "t1", name="Work"),
                tag_entry("desktop", 2, TagAction.CREATE, "t1", name="Other"),
            ]
        )

        tags = engine.project(merged).tags

        assert len(tags) == 1
        assert tags[0].name == "Work"

    def test_tags_sorted_by_order(self, engine):
        merged = MergedLogs(
            tag_logs=[
                tag_entry("laptop", 1, TagAction.CREATE, "a", name="A", order=5),
                tag_entry("laptop", 2, TagAction.CREATE, "b", name="B", order=1),
                tag_entry("laptop", 3, TagAction.CREATE, "c", name="C", order=3),
            ]
        )

        assert [t.id for t in engine.project(merged).tags] == ["b", "c", "a"]

    def test_replay_uses_timestamp_not_input_order(self, engine):
        merged = MergedLogs(
            tag_logs=[
                tag_entry("laptop", 2, TagAction.UPDATE, "t1", name="Second"),
                tag_entry("laptop", 1, TagAction.CREATE, "t1", name="First"),
                tag_entry("laptop", 3, TagAction.UPDATE, "t1", name="Third"),
            ]
        )

        assert engine.project(merged).tags[0].name == "Third"

    def test_same_timestamp_ordered_by_hostname_then_seq(self, engine):
        """Одинаковое время: сначала по hostname, потом по seq."""
        merged = MergedLogs(
            tag_logs=[
                tag_entry("laptop", 1, TagAction.CREATE, "t1", name="Work", ts=at(0)),
                tag_entry("zeta", 7, TagAction.UPDATE, "t1", name="Zeta", ts=at(10)),
                tag_entry("alpha", 9, TagAction.UPDATE, "t1", name="Alpha", ts=at(10)),
                tag_entry("zeta", 3, TagAction.UPDATE, "t1", name="Zeta-early", ts=at(10)),
            ]
        )

        # alpha:9, zeta:3, zeta:7 -> last applied is zeta:7
        assert engine.project(merged).tags[0].name == "Zeta"


# =============================================================================
# ТЕСТЫ: связи файл-тег
# =============================================================================


class TestFileTagReplay:
    """Тесты применения записей связей."""

    def test_add(self, engine):
        merged = MergedLogs(
            tag_logs=[tag_entry("laptop", 1, TagAction.CREATE, "t1", name="Work")],
            file_tag_logs=[file_entry("laptop", 2, FileTagAction.ADD, "notes/a.md", "t1")],
        )

        projection = engine.project(merged)

        assert len(projection.file_tags) == 1
        association = projection.file_tags[0]
        assert association.file_path == "notes/a.md"
        assert association.tag_id == "t1"
        assert association.created_at == at(2)

    def test_add_unknown_tag_is_ignored(self, engine):
        """Связь с несуществующим тегом не появляется и не вызывает ошибку."""
        merged = MergedLogs(
            file_tag_logs=[file_entry("laptop", 1, FileTagAction.ADD, "notes/a.md", "ghost")]
        )

        assert engine.project(merged).file_tags == []

    def test_add_before_create_still_materializes(self, engine):
        """Проверка по итоговому набору тегов, а не по состоянию на момент add."""
        merged = MergedLogs(
            tag_logs=[tag_entry("laptop", 5, TagAction.CREATE, "t1", name="Work")],
            file_tag_logs=[file_entry("desktop", 1, FileTagAction.ADD, "a.md", "t1")],
        )

        assert [ft.file_path for ft in engine.project(merged).file_tags] == ["a.md"]

    def test_deleted_tag_drops_associations(self, engine):
        merged = MergedLogs(
            tag_logs=[
                tag_entry("laptop", 1, TagAction.CREATE, "t1", name="Work"),
                tag_entry("laptop", 3, TagAction.DELETE, "t1"),
            ],
            file_tag_logs=[file_entry("laptop", 2, FileTagAction.ADD, "a.md", "t1")],
        )

        projection = engine.project(merged)

        assert projection.file_tags == []
        assert projection.tags_for_file("a.md") == []

    def test_remove(self, engine):
        merged = MergedLogs(
            tag_logs=[tag_entry("laptop", 1, TagAction.CREATE, "t1", name="Work")],
            file_tag_logs=[
                file_entry("laptop", 2, FileTagAction.ADD, "a.md", "t1"),
                file_entry("laptop", 3, FileTagAction.REMOVE, "a.md", "t1"),
            ],
        )

        assert engine.project(merged).file_tags == []

    def test_remove_then_add_again(self, engine):
        merged = MergedLogs(
            tag_logs=[tag_entry("laptop", 1, TagAction.CREATE, "t1", name="Work")],
            file_tag_logs=[
                file_entry("laptop", 2, FileTagAction.ADD, "a.md", "t1"),
                file_entry("laptop", 3, FileTagAction.REMOVE, "a.md", "t1"),
                file_entry("laptop", 4, FileTagAction.ADD, "a.md", "t1"),
            ],
        )

        file_tags = engine.project(merged).file_tags

        assert len(file_tags) == 1
        assert file_tags[0].created_at == at(4)

    def test_repeated_add_keeps_first_created_at(self, engine):
        merged = MergedLogs(
            tag_logs=[tag_entry("laptop", 1, TagAction.CREATE, "t1", name="Work")],
            file_tag_logs=[
                file_entry("laptop", 2, FileTagAction.ADD, "a.md", "t1"),
                file_entry("desktop", 3, FileTagAction.ADD, "a.md", "t1"),
            ],
        )

        file_tags = engine.project(merged).file_tags

        assert len(file_tags) == 1
        assert file_tags[0].created_at == at(2)

    def test_remove_unknown_association_is_ignored(self, engine):
        merged = MergedLogs(
            file_tag_logs=[file_entry("laptop", 1, FileTagAction.REMOVE, "a.md", "t1")]
        )

        assert engine.project(merged).file_tags == []

    def test_tags_for_file_sorted_by_order(self, engine):
        merged = MergedLogs(
            tag_logs=[
                tag_entry("laptop", 1, TagAction.CREATE, "t1", name="Late", order=9),
                tag_entry("laptop", 2, TagAction.CREATE, "t2", name="Early", order=1),
            ],
            file_tag_logs=[
                file_entry("laptop", 3, FileTagAction.ADD, "a.md", "t1"),
                file_entry("laptop", 4, FileTagAction.ADD, "a.md", "t2"),
            ],
        )

        projection = engine.project(merged)

        assert [t.name for t in projection.tags_for_file("a.md")] == ["Early", "Late"]
        assert projection.files_for_tag("t1") == ["a.md"]


# =============================================================================
# ТЕСТЫ: свойства проекции
# =============================================================================


def _two_host_logs() -> tuple[HostLog, HostLog]:
    laptop = HostLog(
        hostname="laptop",
        tag_logs=[
            tag_entry("laptop", 1, TagAction.CREATE, "t1", name="Work", color="#e53935"),
            tag_entry("laptop", 4, TagAction.UPDATE, "t2", name="Ideas"),
        ],
        file_tag_logs=[file_entry("laptop", 5, FileTagAction.ADD, "a.md", "t2")],
    )
    desktop = HostLog(
        hostname="desktop",
        tag_logs=[
            tag_entry("desktop", 2, TagAction.CREATE, "t2", name="Idea", color="#039be5"),
            tag_entry("desktop", 3, TagAction.CREATE, "t3", name="Urgent"),
            tag_entry("desktop", 6, TagAction.DELETE, "t3"),
        ],
        file_tag_logs=[
            file_entry("desktop", 4, FileTagAction.ADD, "b.md", "t1"),
            file_entry("desktop", 5, FileTagAction.ADD, "b.md", "t3"),
        ],
    )
    return laptop, desktop


class TestProjectionProperties:
    """Идемпотентность, коммутативность, устойчивость к дубликатам."""

    def test_idempotent(self, engine):
        laptop, desktop = _two_host_logs()
        merged = LogMerger().merge([laptop, desktop])

        first = engine.project(merged)
        second = engine.project(merged)

        assert first.model_dump_json() == second.model_dump_json()

    def test_merge_order_does_not_matter(self, engine):
        laptop, desktop = _two_host_logs()
        merger = LogMerger()

        ab = engine.project(merger.merge([laptop, desktop]))
        ba = engine.project(merger.merge([desktop, laptop]))

        assert ab.tags == ba.tags
        assert sorted(ab.file_tags, key=lambda ft: ft.key) == sorted(
            ba.file_tags, key=lambda ft: ft.key
        )

    def test_duplicate_log_does_not_change_state(self, engine):
        laptop, desktop = _two_host_logs()
        merger = LogMerger()

        once = engine.project(merger.merge([laptop, desktop]))
        twice = engine.project(merger.merge([laptop, desktop, laptop.model_copy(deep=True)]))

        assert once.model_dump_json() == twice.model_dump_json()

    def test_combined_state(self, engine):
        laptop, desktop = _two_host_logs()

        projection = engine.project(LogMerger().merge([laptop, desktop]))

        assert [(t.id, t.name) for t in projection.tags] == [("t1", "Work"), ("t2", "Ideas")]
        assert sorted(ft.key for ft in projection.file_tags) == [("a.md", "t2"), ("b.md", "t1")]
