"""Lesson content orchestration.

One flow serves every content kind:

1. Fetch the Level and Topic concurrently
2. Build the prompt for the kind
3. Obtain raw text from the generation client (with retries)
4. Validate the text against the kind's contract
5. Either return preview items or persist them for a lesson in one batch

Every error that leaves the orchestrator keeps its class and code, carries
the content kind and the stage it failed in, and reads
``failed generating <kind>: <cause>``.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

from lessongen.errors import (
    ConfigurationError,
    DomainError,
    DomainErrorCode,
    LessonGenError,
    PersistenceError,
)
from lessongen.prompts.lesson_prompts import build_prompt
from lessongen.repositories.base import (
    LessonContentRepository,
    LessonLookup,
    LessonStore,
    LevelLookup,
    TopicLookup,
)
from lessongen.utils.generation_client import GenerationClient
from lessongen.utils.logging_config import log_context
from lessongen.validators.response_validator import ResponseValidator
from lessongen.validators.schema import (
    ContentKind,
    Lesson,
    LessonContent,
    LessonItem,
    LessonStatus,
    Level,
    Topic,
    response_items,
    to_lesson_item,
)

logger = logging.getLogger(__name__)

DEFAULT_LESSON_DURATION = 30


# ============================================================================
# Generation Mode and Stage
# ============================================================================


@dataclass(frozen=True)
class Preview:
    """Return validated items without storing them."""


@dataclass(frozen=True)
class Persist:
    """Store validated items for ``lesson_id`` in a single batch."""

    lesson_id: str

    def __post_init__(self):
        if not self.lesson_id:
            raise ValueError("Persist mode requires a lesson_id")


GenerationMode = Union[Preview, Persist]


class GenerationStage(str, Enum):
    """Progress of one generation flow."""

    IDLE = "idle"
    FETCHING_CONTEXT = "fetching_context"
    PROMPTING = "prompting"
    GENERATING = "generating"
    VALIDATING = "validating"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class _StageTracker:
    def __init__(self, kind: ContentKind):
        self.kind = kind
        self.stage = GenerationStage.IDLE

    def advance(self, stage: GenerationStage) -> None:
        logger.debug(f"{self.kind.value}: {self.stage.value} -> {stage.value}")
        self.stage = stage


def difficulty_from_level(level_title: str) -> int:
    """Map a level title such as "A2 Elementary" to a 1-5 difficulty (default 3)."""
    title = level_title.lower()

    if "a1" in title or "beginner" in title:
        return 1
    if "a2" in title or "elementary" in title:
        return 2
    if "b1" in title or "intermediate" in title:
        return 3
    if "b2" in title or "upper" in title:
        return 4
    if "c1" in title or "c2" in title or "advanced" in title:
        return 5
    return 3


# ============================================================================
# Orchestrator
# ============================================================================


class ContentOrchestrator:
    """Generate, preview, regenerate and read back lesson content.

    Collaborators are injected; the orchestrator keeps no state between
    calls, so concurrent calls are independent.
    """

    def __init__(
        self,
        level_lookup: LevelLookup,
        topic_lookup: TopicLookup,
        lesson_lookup: LessonLookup,
        repository: LessonContentRepository,
        generation_client: GenerationClient,
        validator: Optional[ResponseValidator] = None,
        lesson_store: Optional[LessonStore] = None,
    ):
        """Initialize the orchestrator.

        Args:
            level_lookup: Resolves level ids
            topic_lookup: Resolves topic ids
            lesson_lookup: Resolves lesson ids (for regeneration)
            repository: Stores and lists generated content
            generation_client: Produces raw text for a prompt
            validator: Response validator (default: ResponseValidator())
            lesson_store: Lesson headers, required only by generate_lesson()
        """
        self.level_lookup = level_lookup
        self.topic_lookup = topic_lookup
        self.lesson_lookup = lesson_lookup
        self.repository = repository
        self.generation_client = generation_client
        self.validator = validator or ResponseValidator()
        self.lesson_store = lesson_store

    # ------------------------------------------------------------------
    # Core flow
    # ------------------------------------------------------------------

    async def generate(
        self,
        kind: Union[ContentKind, str],
        level_id: str,
        topic_id: str,
        mode: GenerationMode,
    ) -> List[LessonItem]:
        """Run the generation flow for one content kind.

        Args:
            kind: vocabulary, grammar or exercises
            level_id: Level to generate for
            topic_id: Topic to generate for
            mode: Preview() or Persist(lesson_id)

        Returns:
            Preview items (empty id and lesson_id) or the records returned by
            the repository

        Raises:
            DomainError: Level or topic not found (NOT_FOUND) or unreachable (LOOKUP_FAILED)
            GenerationError: Provider failed (EXHAUSTED, TIMEOUT)
            ValidationError: Provider output broke the contract
            PersistenceError: Repository rejected the batch
        """
        kind = ContentKind(kind)
        if not isinstance(mode, (Preview, Persist)):
            raise TypeError(f"Unsupported generation mode: {mode!r}")

        lesson_id = mode.lesson_id if isinstance(mode, Persist) else None
        tracker = _StageTracker(kind)

        with log_context(kind=kind.value, lesson_id=lesson_id):
            logger.info(
                f"Generating {kind.value} for level={level_id}, topic={topic_id}, "
                f"mode={'persist' if lesson_id else 'preview'}"
            )
            items = await self._produce(tracker, level_id, topic_id)
            if lesson_id is None:
                result = [to_lesson_item(kind, item) for item in items]
            else:
                result = await self._persist(tracker, items, lesson_id)

            tracker.advance(GenerationStage.DONE)
            logger.info(f"Generated {len(result)} {kind.value} items")
            return result

    async def _produce(self, tracker: _StageTracker, level_id: str, topic_id: str) -> list:
        """Fetch context, prompt, generate and validate; nothing is stored."""
        kind = tracker.kind
        try:
            tracker.advance(GenerationStage.FETCHING_CONTEXT)
            level, topic = await self._fetch_context(level_id, topic_id)

            tracker.advance(GenerationStage.PROMPTING)
            prompt = build_prompt(kind, level, topic)

            tracker.advance(GenerationStage.GENERATING)
            raw_text = await self.generation_client.generate(prompt)

            tracker.advance(GenerationStage.VALIDATING)
            response = self.validator.validate(kind, raw_text)
        except LessonGenError as e:
            raise self._fail(tracker, e) from e
        return response_items(kind, response)

    async def _persist(self, tracker: _StageTracker, items: list, lesson_id: str) -> List[LessonItem]:
        kind = tracker.kind
        tracker.advance(GenerationStage.PERSISTING)
        records = [to_lesson_item(kind, item, lesson_id) for item in items]
        try:
            return await self.repository.save(kind, records)
        except LessonGenError as e:
            raise self._fail(tracker, e) from e
        except Exception as e:
            raise self._fail(tracker, PersistenceError(str(e))) from e

    def _fail(self, tracker: _StageTracker, error: LessonGenError) -> LessonGenError:
        failed_stage = tracker.stage
        tracker.advance(GenerationStage.FAILED)
        logger.error(f"Generation of {tracker.kind.value} failed at {failed_stage.value}: {error}")
        return error.with_context(
            f"failed generating {tracker.kind.value}",
            kind=tracker.kind.value,
            stage=failed_stage.value,
        )

    async def _fetch_context(self, level_id: str, topic_id: str) -> Tuple[Level, Topic]:
        level, topic = await asyncio.gather(
            self._require(self.level_lookup, "level", level_id),
            self._require(self.topic_lookup, "topic", topic_id),
        )
        return level, topic

    @staticmethod
    async def _require(lookup, entity: str, entity_id: str):
        """Resolve ``entity_id``; a missing or failing lookup becomes a DomainError."""
        try:
            found = await lookup.get_by_id(entity_id)
        except LessonGenError:
            raise
        except Exception as e:
            raise DomainError(
                entity,
                entity_id,
                DomainErrorCode.LOOKUP_FAILED,
                message=f"{entity} lookup for id '{entity_id}' failed: {e}",
            ) from e
        if found is None:
            raise DomainError(entity, entity_id)
        return found

    # ------------------------------------------------------------------
    # Use-case entry points
    # ------------------------------------------------------------------

    @staticmethod
    def _mode_for(lesson_id: Optional[str]) -> GenerationMode:
        return Persist(lesson_id) if lesson_id else Preview()

    async def generate_vocabulary(
        self, level_id: str, topic_id: str, lesson_id: Optional[str] = None
    ) -> List[LessonItem]:
        """Generate vocabulary; persisted when ``lesson_id`` is given."""
        return await self.generate(ContentKind.VOCABULARY, level_id, topic_id, self._mode_for(lesson_id))

    async def generate_grammar(
        self, level_id: str, topic_id: str, lesson_id: Optional[str] = None
    ) -> List[LessonItem]:
        """Generate grammar concepts; persisted when ``lesson_id`` is given."""
        return await self.generate(ContentKind.GRAMMAR, level_id, topic_id, self._mode_for(lesson_id))

    async def generate_exercises(
        self, level_id: str, topic_id: str, lesson_id: Optional[str] = None
    ) -> List[LessonItem]:
        """Generate exercises; persisted when ``lesson_id`` is given."""
        return await self.generate(ContentKind.EXERCISES, level_id, topic_id, self._mode_for(lesson_id))

    async def preview_vocabulary(self, level_id: str, topic_id: str) -> List[LessonItem]:
        return await self.generate(ContentKind.VOCABULARY, level_id, topic_id, Preview())

    async def preview_grammar(self, level_id: str, topic_id: str) -> List[LessonItem]:
        return await self.generate(ContentKind.GRAMMAR, level_id, topic_id, Preview())

    async def preview_exercises(self, level_id: str, topic_id: str) -> List[LessonItem]:
        return await self.generate(ContentKind.EXERCISES, level_id, topic_id, Preview())

    async def regenerate(self, kind: Union[ContentKind, str], lesson_id: str) -> List[LessonItem]:
        """Generate ``kind`` again for an existing lesson and persist it.

        Previously stored content is left in place; the new batch is appended.

        Raises:
            DomainError: Lesson (or its level/topic) not found or unreachable
        """
        kind = ContentKind(kind)
        try:
            lesson = await self._require(self.lesson_lookup, "lesson", lesson_id)
        except DomainError as error:
            logger.error(f"Cannot regenerate {kind.value}: {error}")
            raise error.with_context(
                f"failed generating {kind.value}",
                kind=kind.value,
                stage=GenerationStage.FETCHING_CONTEXT.value,
            ) from error

        logger.info(f"Regenerating {kind.value} for lesson={lesson_id}")
        return await self.generate(kind, lesson.level_id, lesson.topic_id, Persist(lesson_id))

    async def regenerate_vocabulary(self, lesson_id: str) -> List[LessonItem]:
        return await self.regenerate(ContentKind.VOCABULARY, lesson_id)

    async def regenerate_grammar(self, lesson_id: str) -> List[LessonItem]:
        return await self.regenerate(ContentKind.GRAMMAR, lesson_id)

    async def regenerate_exercises(self, lesson_id: str) -> List[LessonItem]:
        return await self.regenerate(ContentKind.EXERCISES, lesson_id)

    # ------------------------------------------------------------------
    # Read-back
    # ------------------------------------------------------------------

    async def get_content(self, kind: Union[ContentKind, str], lesson_id: str) -> List[LessonItem]:
        """Return stored items of ``kind`` for ``lesson_id``."""
        return await self.repository.list_by_lesson(ContentKind(kind), lesson_id)

    async def get_vocabulary_by_lesson(self, lesson_id: str) -> List[LessonItem]:
        return await self.get_content(ContentKind.VOCABULARY, lesson_id)

    async def get_grammar_by_lesson(self, lesson_id: str) -> List[LessonItem]:
        return await self.get_content(ContentKind.GRAMMAR, lesson_id)

    async def get_exercises_by_lesson(self, lesson_id: str) -> List[LessonItem]:
        return await self.get_content(ContentKind.EXERCISES, lesson_id)

    # ------------------------------------------------------------------
    # Full lesson
    # ------------------------------------------------------------------

    async def generate_lesson(self, user_id: str, level_id: str, topic_id: str) -> LessonContent:
        """Create a lesson with vocabulary, grammar and exercises.

        An existing READY lesson for the same user, level and topic is
        returned as stored. Otherwise a new lesson is created in GENERATING
        state and the three kinds are generated and validated concurrently.
        Content is saved only once all three have validated, then the lesson
        is marked READY. If any kind fails the lesson is marked ERROR and the
        error is re-raised.

        Raises:
            ConfigurationError: No lesson_store was configured
            DomainError: Level or topic not found
        """
        if self.lesson_store is None:
            raise ConfigurationError("generate_lesson requires a lesson_store")

        existing = await self.lesson_store.find_by_user_level_topic(user_id, level_id, topic_id)
        if existing is not None and existing.status == LessonStatus.READY:
            logger.info(f"Returning existing lesson {existing.id} for user={user_id}")
            return await self._load_content(existing)

        level, topic = await self._fetch_context(level_id, topic_id)
        lesson = await self.lesson_store.create_lesson(
            user_id=user_id,
            level_id=level_id,
            topic_id=topic_id,
            title=f"{level.title}: {topic.title}",
            description=f"{topic.title} lesson for level {level.title}",
            estimated_duration=DEFAULT_LESSON_DURATION,
            difficulty=difficulty_from_level(level.title),
        )
        logger.info(f"Lesson {lesson.id} created, generating content (level={level.title}, topic={topic.title})")

        async def produce(kind: ContentKind):
            tracker = _StageTracker(kind)
            with log_context(kind=kind.value, lesson_id=lesson.id):
                items = await self._produce(tracker, level_id, topic_id)
            return tracker, items

        try:
            # All three kinds must validate before anything is saved
            produced = await asyncio.gather(*(produce(kind) for kind in ContentKind))
            saved = []
            for tracker, items in produced:
                with log_context(kind=tracker.kind.value, lesson_id=lesson.id):
                    saved.append(await self._persist(tracker, items, lesson.id))
                    tracker.advance(GenerationStage.DONE)
        except Exception:
            await self.lesson_store.update_status(lesson.id, LessonStatus.ERROR)
            raise

        vocabulary, grammar, exercises = saved
        lesson = await self.lesson_store.update_status(lesson.id, LessonStatus.READY)
        logger.info(
            f"Lesson {lesson.id} ready: {len(vocabulary)} vocabulary, "
            f"{len(grammar)} grammar, {len(exercises)} exercises"
        )
        return LessonContent(lesson=lesson, vocabulary=vocabulary, grammar=grammar, exercises=exercises)

    async def _load_content(self, lesson: Lesson) -> LessonContent:
        vocabulary, grammar, exercises = await asyncio.gather(
            self.get_vocabulary_by_lesson(lesson.id),
            self.get_grammar_by_lesson(lesson.id),
            self.get_exercises_by_lesson(lesson.id),
        )
        return LessonContent(lesson=lesson, vocabulary=vocabulary, grammar=grammar, exercises=exercises)
