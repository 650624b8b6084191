"""Tag service: the only entry point callers use for tags."""

import asyncio
import enum
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from uuid import uuid4

from ..core.errors import StorageError, TagEngineError
from ..core.logging import generate_operation_id, get_logger, operation_id_var
from ..integrations.workspace import FileIdentifierSource, HostIdentity, SharedFolder
from ..models import (
    FileTagAction,
    FileTagLogEntry,
    HostLog,
    Tag,
    TagAction,
    TagData,
    TagLogEntry,
    TagProjection,
    random_tag_color,
    utc_now,
)
from ..repositories import LogFileNaming, LogMerger, LogStore
from .projection import ProjectionEngine
from .tag_filter import TagFilter

logger = get_logger(__name__)


class CacheState(str, enum.Enum):
    """State of the projection cache."""

    UNLOADED = "unloaded"
    LOADED = "loaded"


@dataclass
class ProjectionCache:
    """
    Cached projection of one workspace.

    UNLOADED - проекции нет (начальное состояние и после invalidate)
    LOADED - проекция есть, запросы отвечают из кэша

    generation растёт при каждом clear(): результат, посчитанный до смены
    папки, в кэш уже не попадёт.
    """

    projection: TagProjection | None = None
    local_log: HostLog | None = None
    generation: int = 0

    @property
    def state(self) -> CacheState:
        return CacheState.UNLOADED if self.projection is None else CacheState.LOADED

    def store(
        self,
        projection: TagProjection,
        local_log: HostLog | None = None,
        generation: int | None = None,
    ) -> bool:
        """Cache a projection built during `generation`; stale results are dropped."""
        if generation is not None and generation != self.generation:
            return False
        self.projection = projection
        if local_log is not None:
            self.local_log = local_log
        return True

    def clear(self) -> None:
        self.projection = None
        self.local_log = None
        self.generation += 1


class TagService:
    """
    Сервис для работы с тегами.

    Каждая мутация:
    1. Добавляет запись в лог этого хоста (в памяти)
    2. Сливает логи всех хостов из общей папки
    3. Пересчитывает проекцию
    4. Сохраняет лог этого хоста на диск
    5. Кладёт проекцию в кэш

    Все вызовы сериализуются через asyncio.Lock, файловый ввод-вывод
    выполняется в отдельном потоке.
    """

    def __init__(
        self,
        shared_folder: SharedFolder,
        host: HostIdentity,
        file_source: FileIdentifierSource | None = None,
        naming: LogFileNaming | None = None,
    ):
        """Initialize service.

        Args:
            shared_folder: Provider of the current shared folder
            host: Identity of this machine
            file_source: Source of note file identifiers (optional)
            naming: Host log file naming convention
        """
        self.shared_folder = shared_folder
        self.host = host
        self.file_source = file_source
        self.naming = naming or LogFileNaming.from_settings()
        self.merger = LogMerger(self.naming)
        self.engine = ProjectionEngine()
        self.cache = ProjectionCache()
        self._lock = asyncio.Lock()

        shared_folder.add_listener(self._on_folder_changed)

    @property
    def state(self) -> CacheState:
        return self.cache.state

    def invalidate(self) -> None:
        """Drop the cached projection; the next query re-merges from scratch."""
        self.cache.clear()
        logger.debug("Tag cache invalidated")

    def close(self) -> None:
        """Stop following shared folder changes."""
        self.shared_folder.remove_listener(self._on_folder_changed)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_tag(self, name: str, color: str | None = None, order: int | None = None) -> str:
        """
        Создать новый тег.

        Args:
            name: Название тега (дубликаты допустимы)
            color: Цвет (по умолчанию - случайный из палитры)
            order: Позиция для сортировки (по умолчанию - текущее число тегов)

        Returns:
            ID нового тега

        Raises:
            StorageError: Если общая папка недоступна
        """
        async with self._lock:
            if order is None:
                order = len((await self._current_projection()).tags)
            tag_id = uuid4().hex
            data = TagData(name=name, color=color or random_tag_color(), order=order)
            await self._append(tag_changes=[(TagAction.CREATE, tag_id, data)])

        logger.info("Tag created", extra={"tag_id": tag_id, "tag_name": name})
        return tag_id

    async def update_tag(
        self,
        tag_id: str,
        name: str | None = None,
        color: str | None = None,
        order: int | None = None,
    ) -> TagProjection:
        """
        Частично обновить тег.

        Непереданные поля не меняются. Для неизвестного tag_id запись всё
        равно пишется (create мог ещё не доехать с другого хоста).
        """
        data = TagData(name=name, color=color, order=order)
        async with self._lock:
            projection = await self._append(tag_changes=[(TagAction.UPDATE, tag_id, data)])

        logger.info(
            "Tag updated", extra={"tag_id": tag_id, "fields": sorted(data.present_fields())}
        )
        return projection

    async def delete_tag(self, tag_id: str) -> TagProjection:
        """
        Удалить тег.

        Связи с файлами отдельно не удаляются: они исчезают при проекции,
        потому что тега больше нет в итоговом наборе.
        """
        async with self._lock:
            projection = await self._append(tag_changes=[(TagAction.DELETE, tag_id, TagData())])

        logger.info("Tag deleted", extra={"tag_id": tag_id})
        return projection

    async def add_file_tag(self, file_path: str, tag_id: str) -> TagProjection:
        """Assign a tag to a note file."""
        async with self._lock:
            projection = await self._append(
                file_tag_changes=[(FileTagAction.ADD, file_path, tag_id)]
            )

        logger.info("Tag assigned", extra={"file_path": file_path, "tag_id": tag_id})
        return projection

    async def remove_file_tag(self, file_path: str, tag_id: str) -> TagProjection:
        """Remove a tag from a note file."""
        async with self._lock:
            projection = await self._append(
                file_tag_changes=[(FileTagAction.REMOVE, file_path, tag_id)]
            )

        logger.info("Tag unassigned", extra={"file_path": file_path, "tag_id": tag_id})
        return projection

    async def reorder_tags(self, tag_ids: list[str]) -> TagProjection:
        """
        Переупорядочить теги (drag-and-drop в списке тегов).

        Args:
            tag_ids: ID тегов в новом порядке; order = позиция в списке

        Пишется по одной update-записи на каждый тег, чей order изменился.
        """
        async with self._lock:
            projection = await self._current_projection()
            changes = []
            for index, tag_id in enumerate(tag_ids):
                tag = projection.get_tag(tag_id)
                if tag is not None and tag.order != index:
                    changes.append((TagAction.UPDATE, tag_id, TagData(order=index)))

            if not changes:
                return projection

            projection = await self._append(tag_changes=changes)

        logger.info("Tags reordered", extra={"changed": len(changes)})
        return projection

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_projection(self) -> TagProjection:
        """
        Текущее состояние тегов.

        Ошибки чтения не пробрасываются: теги - дополнение к заметкам,
        без них редактор должен работать. Возвращается пустая проекция.
        """
        async with self._lock:
            try:
                return await self._current_projection()
            except TagEngineError as e:
                logger.warning(
                    "Tags unavailable, returning empty state",
                    extra={"error_code": e.code, "reason": e.message},
                )
                return TagProjection()

    async def get_tags(self) -> list[Tag]:
        """All tags sorted by order."""
        return (await self.get_projection()).tags

    async def get_file_tags(self, file_path: str) -> list[Tag]:
        """Tags assigned to a file, sorted by order."""
        return (await self.get_projection()).tags_for_file(file_path)

    async def get_files_for_tag(self, tag_id: str) -> list[str]:
        return (await self.get_projection()).files_for_tag(tag_id)

    async def find_tag_by_name(self, name: str) -> Tag | None:
        """Exact name lookup (callers use it to keep names unique)."""
        return next((tag for tag in await self.get_tags() if tag.name == name), None)

    async def search_tags(self, query: str) -> list[Tag]:
        """
        Поиск тегов по названию (без учёта регистра).

        Пустой запрос возвращает все теги.
        """
        tags = await self.get_tags()
        query = query.strip().lower()
        if not query:
            return tags
        return [tag for tag in tags if query in tag.name.lower()]

    async def get_unused_tags(self) -> list[Tag]:
        """Tags not assigned to any file."""
        projection = await self.get_projection()
        used = {ft.tag_id for ft in projection.file_tags}
        return [tag for tag in projection.tags if tag.id not in used]

    async def filter_files(
        self, tag_filter: TagFilter, file_paths: Iterable[str] | None = None
    ) -> list[str]:
        """
        Отфильтровать файлы по тегам.

        Args:
            tag_filter: Show/hide statuses
            file_paths: Files to filter (default: all notes from file_source)

        Raises:
            ValueError: If no file paths given and no file source configured
        """
        if file_paths is None:
            if self.file_source is None:
                raise ValueError("No file identifier source configured")
            file_paths = await asyncio.to_thread(self.file_source.list_file_paths)

        async with self._lock:
            try:
                projection = await self._current_projection()
            except TagEngineError as e:
                logger.warning(
                    "Tags unavailable, files left unfiltered",
                    extra={"error_code": e.code, "reason": e.message},
                )
                return list(file_paths)

        tag_filter.prune(tag.id for tag in projection.tags)
        return tag_filter.apply(file_paths, projection)

    # ------------------------------------------------------------------
    # Internals (must be called with the lock held)
    # ------------------------------------------------------------------

    def _require_folder(self) -> Path:
        folder = self.shared_folder.path
        if folder is None:
            raise StorageError("No shared folder configured")
        return folder

    def _store(self, folder: Path) -> LogStore:
        return LogStore(folder, self.host.hostname, self.naming)

    async def _current_projection(self) -> TagProjection:
        if self.cache.projection is not None:
            return self.cache.projection

        folder = self._require_folder()
        generation = self.cache.generation
        merged = await asyncio.to_thread(self.merger.merge_all, folder, self.cache.local_log)
        projection = self.engine.project(merged)
        self.cache.store(projection, generation=generation)
        return projection

    async def _local_log(self, folder: Path) -> HostLog:
        if self.cache.local_log is not None:
            return self.cache.local_log

        generation = self.cache.generation
        local_log = await asyncio.to_thread(self._store(folder).load)
        if generation == self.cache.generation:
            self.cache.local_log = local_log
        return local_log

    async def _append(
        self,
        tag_changes: list[tuple[TagAction, str, TagData]] | None = None,
        file_tag_changes: list[tuple[FileTagAction, str, str]] | None = None,
    ) -> TagProjection:
        """Append entries, re-project and persist.

        Новое состояние попадает в кэш только после успешной записи на диск,
        иначе StorageError уходит вызывающему, а кэш не меняется.
        """
        folder = self._require_folder()
        generation = self.cache.generation
        token = operation_id_var.set(generate_operation_id())
        try:
            local_log = (await self._local_log(folder)).model_copy(deep=True)

            for action, tag_id, data in tag_changes or []:
                seq, timestamp = self._next_position(local_log)
                local_log.tag_logs.append(
                    TagLogEntry(
                        id=f"{self.host.hostname}:{seq}",
                        seq=seq,
                        timestamp=timestamp,
                        hostname=self.host.hostname,
                        action=action,
                        tag_id=tag_id,
                        data=data,
                    )
                )

            for action, file_path, tag_id in file_tag_changes or []:
                seq, timestamp = self._next_position(local_log)
                local_log.file_tag_logs.append(
                    FileTagLogEntry(
                        id=f"{self.host.hostname}:{seq}",
                        seq=seq,
                        timestamp=timestamp,
                        hostname=self.host.hostname,
                        action=action,
                        file_path=file_path,
                        tag_id=tag_id,
                    )
                )

            merged = await asyncio.to_thread(self.merger.merge_all, folder, local_log)
            projection = self.engine.project(merged)

            await asyncio.to_thread(self._store(folder).save, local_log)

            if not self.cache.store(projection, local_log, generation=generation):
                logger.debug("Shared folder changed during write, result not cached")
            return projection
        finally:
            operation_id_var.reset(token)

    @staticmethod
    def _next_position(local_log: HostLog) -> tuple[int, datetime]:
        """Next (seq, timestamp) for this host; timestamps never go backwards."""
        seq = local_log.last_seq + 1
        timestamp = utc_now()
        last = local_log.last_timestamp
        if last is not None and last > timestamp:
            timestamp = last
        return seq, timestamp

    def _on_folder_changed(self, _path: Path | None) -> None:
        self.invalidate()
