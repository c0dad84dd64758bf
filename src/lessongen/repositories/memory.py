"""In-process implementation of every repository interface.

Used by tests and as the working set of ``JsonLessonStore``.
"""

import logging
import uuid
from datetime import UTC, datetime
from typing import Dict, List, Optional, Sequence, Tuple

from lessongen.errors import DomainError
from lessongen.validators.schema import (
    ContentKind,
    Lesson,
    LessonItem,
    LessonStatus,
    Level,
    Topic,
)

logger = logging.getLogger(__name__)


class InMemoryCatalog:
    """Levels, topics, lessons and generated content held in dicts.

    Implements LevelLookup, TopicLookup and LessonLookup (via the
    ``*_lookup`` properties), LessonContentRepository and LessonStore.

    Attributes:
        save_calls: ``(kind, record_count)`` for every successful ``save``
    """

    def __init__(self):
        self.levels: Dict[str, Level] = {}
        self.topics: Dict[str, Topic] = {}
        self.lessons: Dict[str, Lesson] = {}
        self.content: Dict[ContentKind, List[LessonItem]] = {kind: [] for kind in ContentKind}
        self.save_calls: List[Tuple[ContentKind, int]] = []

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def add_level(self, level: Level) -> Level:
        self.levels[level.id] = level
        return level

    def add_topic(self, topic: Topic) -> Topic:
        self.topics[topic.id] = topic
        return topic

    def add_lesson(self, lesson: Lesson) -> Lesson:
        self.lessons[lesson.id] = lesson
        return lesson

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def level_lookup(self) -> "_DictLookup":
        return _DictLookup(self.levels)

    @property
    def topic_lookup(self) -> "_DictLookup":
        return _DictLookup(self.topics)

    @property
    def lesson_lookup(self) -> "_DictLookup":
        return _DictLookup(self.lessons)

    # ------------------------------------------------------------------
    # LessonContentRepository
    # ------------------------------------------------------------------

    async def save(self, kind: ContentKind, records: Sequence[LessonItem]) -> List[LessonItem]:
        """Assign id/created_at and append ``records``.

        Copies are built first and appended in one step, so a failure while
        preparing the batch leaves stored content untouched.
        """
        kind = ContentKind(kind)
        now = datetime.now(UTC)
        persisted = [
            record.model_copy(update={"id": record.id or str(uuid.uuid4()), "created_at": now})
            for record in records
        ]
        self.content[kind].extend(persisted)
        self.save_calls.append((kind, len(persisted)))
        logger.debug(f"Saved {len(persisted)} {kind.value} records")
        return persisted

    async def list_by_lesson(self, kind: ContentKind, lesson_id: str) -> List[LessonItem]:
        return [item for item in self.content[ContentKind(kind)] if item.lesson_id == lesson_id]

    # ------------------------------------------------------------------
    # LessonStore
    # ------------------------------------------------------------------

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
        now = datetime.now(UTC)
        lesson = Lesson(
            id=str(uuid.uuid4()),
            user_id=user_id,
            level_id=level_id,
            topic_id=topic_id,
            title=title,
            description=description,
            estimated_duration=estimated_duration,
            difficulty=difficulty,
            status=LessonStatus.GENERATING,
            created_at=now,
            updated_at=now,
        )
        self.lessons[lesson.id] = lesson
        return lesson

    async def update_status(self, lesson_id: str, status: LessonStatus) -> Lesson:
        lesson = self.lessons.get(lesson_id)
        if lesson is None:
            raise DomainError("lesson", lesson_id)
        updated = lesson.model_copy(update={"status": LessonStatus(status), "updated_at": datetime.now(UTC)})
        self.lessons[lesson_id] = updated
        return updated

    async def find_by_user_level_topic(self, user_id: str, level_id: str, topic_id: str) -> Optional[Lesson]:
        """Return the most recently created matching lesson."""
        for lesson in reversed(list(self.lessons.values())):
            if lesson.user_id == user_id and lesson.level_id == level_id and lesson.topic_id == topic_id:
                return lesson
        return None


class _DictLookup:
    """``get_by_id`` over a dict of entities."""

    def __init__(self, entities: Dict[str, object]):
        self._entities = entities

    async def get_by_id(self, entity_id: str):
        return self._entities.get(entity_id)
