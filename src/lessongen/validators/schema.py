"""Pydantic models for lesson content and its reference entities.

The generated-item models double as the wire contract between the
provider's free text and the validated domain objects. Wire names are
camelCase (``partOfSpeech``, ``commonMistakes``, ``correctAnswer``); the
Python attributes are snake_case and both forms are accepted on input.

Validation is strict: numbers are never coerced into strings,
difficulty never accepts floats, numeric strings or booleans, and required
strings and arrays must be non-empty.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Optional, Type, Union

from pydantic import BaseModel, Field, StrictInt, StrictStr


# ============================================================================
# Enums
# ============================================================================


class ContentKind(str, Enum):
    """Generation kind. Exactly one is validated per pipeline run."""

    VOCABULARY = "vocabulary"
    GRAMMAR = "grammar"
    EXERCISES = "exercises"


class PartOfSpeech(str, Enum):
    """Part of speech of a vocabulary item."""

    NOUN = "noun"
    VERB = "verb"
    ADJECTIVE = "adjective"
    ADVERB = "adverb"
    PREPOSITION = "preposition"
    OTHER = "other"


class ExerciseType(str, Enum):
    """Interactive exercise format."""

    FILL_BLANK = "fill-blank"
    MULTIPLE_CHOICE = "multiple-choice"
    TRANSLATION = "translation"
    MATCHING = "matching"
    ORDERING = "ordering"


class LessonStatus(str, Enum):
    """Lifecycle of a stored lesson."""

    GENERATING = "generating"
    READY = "ready"
    COMPLETED = "completed"
    ERROR = "error"


NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]
Difficulty = Annotated[StrictInt, Field(ge=1, le=5)]


# ============================================================================
# Reference Entities (owned by external collaborators)
# ============================================================================


class Level(BaseModel):
    """Proficiency tier (e.g. Beginner, A2)."""

    id: str = Field(..., description="Level identifier")
    title: str = Field(..., description="Display title, embedded verbatim in prompts")
    sub_title: Optional[str] = None
    description: Optional[str] = None

    model_config = {"extra": "allow"}


class Topic(BaseModel):
    """Subject-matter tier (e.g. Family, Travel)."""

    id: str = Field(..., description="Topic identifier")
    title: str = Field(..., description="Display title, embedded verbatim in prompts")
    description: Optional[str] = None

    model_config = {"extra": "allow"}


class LessonRef(BaseModel):
    """Minimal lesson view needed to regenerate its content."""

    id: str
    level_id: str
    topic_id: str

    model_config = {"extra": "allow"}


class Lesson(LessonRef):
    """Stored lesson aggregate header."""

    user_id: str
    title: str
    description: str = ""
    estimated_duration: int = Field(default=30, description="Minutes")
    difficulty: int = Field(default=3, ge=1, le=5)
    status: LessonStatus = LessonStatus.GENERATING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# Generated Items (wire contract)
# ============================================================================


class VocabularyItem(BaseModel):
    """A single vocabulary entry produced by the provider."""

    word: NonEmptyStr
    pronunciation: NonEmptyStr = Field(..., description="IPA transcription")
    translation: NonEmptyStr
    definition: NonEmptyStr
    example: NonEmptyStr
    part_of_speech: PartOfSpeech = Field(..., alias="partOfSpeech")
    difficulty: Difficulty

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "word": "example",
                "pronunciation": "/ɪɡˈzæmpəl/",
                "translation": "ejemplo",
                "definition": "a thing characteristic of its kind",
                "example": "This is a good example of modern art.",
                "partOfSpeech": "noun",
                "difficulty": 3,
            }
        },
    }


class GrammarConcept(BaseModel):
    """A grammar concept with rule, examples, mistakes and tips."""

    title: NonEmptyStr
    explanation: NonEmptyStr
    rule: NonEmptyStr
    examples: List[NonEmptyStr] = Field(..., min_length=1)
    common_mistakes: List[NonEmptyStr] = Field(..., min_length=1, alias="commonMistakes")
    tips: List[NonEmptyStr] = Field(..., min_length=1)

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "title": "Present Simple",
                "explanation": "Used for habits and general truths",
                "rule": "Subject + base verb (+ s/es for 3rd person)",
                "examples": ["I work every day.", "She likes coffee."],
                "commonMistakes": ["'He work' instead of 'He works'"],
                "tips": ["He/She/It + verb+s"],
            }
        },
    }


class ExerciseItem(BaseModel):
    """An interactive exercise.

    ``correct_answer`` is either a non-empty string or a non-empty list of
    non-empty strings (matching/ordering exercises).
    """

    type: ExerciseType
    question: NonEmptyStr
    options: Optional[List[StrictStr]] = None
    correct_answer: Union[NonEmptyStr, Annotated[List[NonEmptyStr], Field(min_length=1)]] = Field(
        ..., alias="correctAnswer"
    )
    explanation: NonEmptyStr
    difficulty: Difficulty

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "type": "multiple-choice",
                "question": "Which sentence is correct?",
                "options": ["She go to school.", "She goes to school."],
                "correctAnswer": "She goes to school.",
                "explanation": "Third person singular requires 's' ending.",
                "difficulty": 3,
            }
        },
    }


# ============================================================================
# Provider Responses (one per content kind)
# ============================================================================


class VocabularyResponse(BaseModel):
    """Top-level ``{"vocabulary": [...]}`` object."""

    vocabulary: List[VocabularyItem] = Field(..., min_length=1)


class GrammarResponse(BaseModel):
    """Top-level ``{"grammar": [...]}`` object."""

    grammar: List[GrammarConcept] = Field(..., min_length=1)


class ExerciseResponse(BaseModel):
    """Top-level ``{"exercises": [...]}`` object."""

    exercises: List[ExerciseItem] = Field(..., min_length=1)


# ============================================================================
# Lesson-bound Items (persisted or preview)
# ============================================================================


class LessonItemMixin(BaseModel):
    """Identity fields. Empty ``id``/``lesson_id`` marks a preview item."""

    id: str = ""
    lesson_id: str = Field(default="", alias="lessonId")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @property
    def is_preview(self) -> bool:
        return not self.id and not self.lesson_id


class LessonVocabulary(VocabularyItem, LessonItemMixin):
    """Vocabulary item bound to a lesson."""


class LessonGrammar(GrammarConcept, LessonItemMixin):
    """Grammar concept bound to a lesson."""


class LessonExercise(ExerciseItem, LessonItemMixin):
    """Exercise bound to a lesson."""


class LessonContent(BaseModel):
    """A lesson with all of its generated content."""

    lesson: Lesson
    vocabulary: List[LessonVocabulary] = Field(default_factory=list)
    grammar: List[LessonGrammar] = Field(default_factory=list)
    exercises: List[LessonExercise] = Field(default_factory=list)


GeneratedItem = Union[VocabularyItem, GrammarConcept, ExerciseItem]
LessonItem = Union[LessonVocabulary, LessonGrammar, LessonExercise]
ContentResponse = Union[VocabularyResponse, GrammarResponse, ExerciseResponse]


RESPONSE_MODELS: Dict[ContentKind, Type[BaseModel]] = {
    ContentKind.VOCABULARY: VocabularyResponse,
    ContentKind.GRAMMAR: GrammarResponse,
    ContentKind.EXERCISES: ExerciseResponse,
}

LESSON_ITEM_MODELS: Dict[ContentKind, Type[BaseModel]] = {
    ContentKind.VOCABULARY: LessonVocabulary,
    ContentKind.GRAMMAR: LessonGrammar,
    ContentKind.EXERCISES: LessonExercise,
}


def response_items(kind: ContentKind, response: BaseModel) -> List[GeneratedItem]:
    """Return the item list of a validated response (``response.<kind>``)."""
    return list(getattr(response, kind.value))


def to_lesson_item(kind: ContentKind, item: GeneratedItem, lesson_id: str = "") -> LessonItem:
    """Bind a generated item to ``lesson_id`` (empty for previews)."""
    model = LESSON_ITEM_MODELS[kind]
    return model(**item.model_dump(), lesson_id=lesson_id)
