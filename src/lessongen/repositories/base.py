"""Interfaces of the external collaborators used by the orchestrator.

Lookups return ``None`` when the entity does not exist; the orchestrator
turns that into ``DomainError(NOT_FOUND)``.
"""

from typing import List, Optional, Protocol, Sequence, runtime_checkable

from lessongen.validators.schema import (
    ContentKind,
    Lesson,
    LessonItem,
    LessonRef,
    LessonStatus,
    Level,
    Topic,
)


@runtime_checkable
class LevelLookup(Protocol):
    async def get_by_id(self, level_id: str) -> Optional[Level]: ...


@runtime_checkable
class TopicLookup(Protocol):
    async def get_by_id(self, topic_id: str) -> Optional[Topic]: ...


@runtime_checkable
class LessonLookup(Protocol):
    async def get_by_id(self, lesson_id: str) -> Optional[LessonRef]: ...


@runtime_checkable
class LessonContentRepository(Protocol):
    """Durable storage of generated lesson content."""

    async def save(self, kind: ContentKind, records: Sequence[LessonItem]) -> List[LessonItem]:
        """Persist ``records`` as one batch and return them with id/created_at.

        Must be all-or-nothing: either every record is stored or none is.
        """
        ...

    async def list_by_lesson(self, kind: ContentKind, lesson_id: str) -> List[LessonItem]:
        """Return stored items of ``kind`` for ``lesson_id`` in insertion order."""
        ...


@runtime_checkable
class LessonStore(Protocol):
    """Lesson headers used by full-lesson generation."""

    async def create_lesson(
        self,
        user_id: str,
        level_id: str,
        topic_id: str,
        title: str,
        description: str,
        estimated_duration: int,
        difficulty: int,
    ) -> Lesson: ...

    async def update_status(self, lesson_id: str, status: LessonStatus) -> Lesson: ...

    async def find_by_user_level_topic(self, user_id: str, level_id: str, topic_id: str) -> Optional[Lesson]: ...
