"""JSON-file backed lesson store used by the CLI.

The whole catalog lives in one document::

    {
      "levels": [{"id": "L1", "title": "Beginner"}],
      "topics": [{"id": "T1", "title": "Family"}],
      "lessons": [{"id": "LES1", "level_id": "L1", "topic_id": "T1", ...}],
      "content": {"vocabulary": [...], "grammar": [...], "exercises": [...]}
    }

Every mutation rewrites the document atomically (temp file + ``os.replace``)
in a worker thread, so the event loop keeps serving other flows.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from lessongen.errors import PersistenceError
from lessongen.repositories.memory import InMemoryCatalog
from lessongen.utils.file_io import read_json, write_json
from lessongen.validators.schema import (
    LESSON_ITEM_MODELS,
    ContentKind,
    Lesson,
    LessonItem,
    LessonStatus,
    Level,
    Topic,
)

logger = logging.getLogger(__name__)


class JsonLessonStore(InMemoryCatalog):
    """``InMemoryCatalog`` that loads from and writes back to a JSON file."""

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)
        self._lock = asyncio.Lock()
        if self.path.exists():
            self._load(read_json(self.path))
            logger.info(
                f"Loaded store {self.path}: {len(self.levels)} levels, "
                f"{len(self.topics)} topics, {len(self.lessons)} lessons"
            )
        else:
            logger.info(f"Store {self.path} does not exist yet, starting empty")

    def _load(self, document: Dict[str, Any]) -> None:
        for data in document.get("levels", []):
            self.add_level(Level.model_validate(data))
        for data in document.get("topics", []):
            self.add_topic(Topic.model_validate(data))
        for data in document.get("lessons", []):
            self.add_lesson(Lesson.model_validate(data))
        content = document.get("content", {})
        for kind in ContentKind:
            model = LESSON_ITEM_MODELS[kind]
            self.content[kind] = [model.model_validate(data) for data in content.get(kind.value, [])]

    def to_document(self) -> Dict[str, Any]:
        return {
            "levels": [level.model_dump(mode="json") for level in self.levels.values()],
            "topics": [topic.model_dump(mode="json") for topic in self.topics.values()],
            "lessons": [lesson.model_dump(mode="json") for lesson in self.lessons.values()],
            "content": {
                kind.value: [item.model_dump(mode="json", by_alias=True) for item in self.content[kind]]
                for kind in ContentKind
            },
        }

    def flush(self) -> None:
        """Write the current state to ``path``."""
        write_json(self.to_document(), self.path)

    async def save(self, kind: ContentKind, records: Sequence[LessonItem]) -> List[LessonItem]:
        """Append ``records`` and rewrite the file; on write failure nothing is kept."""
        kind = ContentKind(kind)
        async with self._lock:
            previous = list(self.content[kind])
            saved_calls = len(self.save_calls)
            persisted = await super().save(kind, records)
            try:
                await asyncio.to_thread(self.flush)
            except OSError as e:
                self.content[kind] = previous
                del self.save_calls[saved_calls:]
                raise PersistenceError(f"could not write {self.path}: {e}") from e
            return persisted

    async def create_lesson(
        self,
        user_id: str,
        level_id: str,
        topic_id: str,
        title: str,
        description: str,
        estimated_duration: int,
        difficulty: int,
    ) -> Lesson:
        async with self._lock:
            lesson = await super().create_lesson(
                user_id, level_id, topic_id, title, description, estimated_duration, difficulty
            )
            await asyncio.to_thread(self.flush)
            return lesson

    async def update_status(self, lesson_id: str, status: LessonStatus) -> Lesson:
        async with self._lock:
            lesson = await super().update_status(lesson_id, status)
            await asyncio.to_thread(self.flush)
            return lesson
