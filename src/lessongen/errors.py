"""Error taxonomy for the lesson content generation pipeline.

Lower layers raise typed errors; the orchestrator re-raises them with
kind-specific context via ``with_context()`` so callers can still branch on
the error class and ``code``.

- ConfigurationError: missing/invalid settings, fatal at construction
- GenerationError: provider failures (EMPTY_RESPONSE, EXHAUSTED, TIMEOUT)
- ValidationError: provider output broke the contract (MALFORMED_JSON, SCHEMA_VIOLATION)
- DomainError: missing or unreachable level/topic/lesson (NOT_FOUND, LOOKUP_FAILED)
- PersistenceError: repository failures (SAVE_FAILED)
"""

from enum import Enum
from typing import List, Optional


class GenerationErrorCode(str, Enum):
    """Failure kinds of the generation client."""

    EMPTY_RESPONSE = "empty_response"
    EXHAUSTED = "exhausted"
    TIMEOUT = "timeout"


class ValidationErrorCode(str, Enum):
    """Failure kinds of the response validator."""

    MALFORMED_JSON = "malformed_json"
    SCHEMA_VIOLATION = "schema_violation"


class DomainErrorCode(str, Enum):
    """Failure kinds of reference lookups."""

    NOT_FOUND = "not_found"
    LOOKUP_FAILED = "lookup_failed"


class PersistenceErrorCode(str, Enum):
    """Failure kinds of the content repository."""

    SAVE_FAILED = "save_failed"


class LessonGenError(Exception):
    """Base class for every error raised by the pipeline.

    Attributes:
        code: Error code enum member (None for configuration errors)
        kind: Generation kind being processed when the error left the orchestrator
        stage: Orchestrator stage where the error happened
    """

    def __init__(self, message: str, code: Optional[Enum] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.kind: Optional[str] = None
        self.stage: Optional[str] = None

    def __str__(self) -> str:
        return self.message

    def with_context(self, prefix: str, kind: Optional[str] = None, stage: Optional[str] = None) -> "LessonGenError":
        """Return a copy of this error with ``prefix`` prepended to its message.

        The copy keeps the class, code and every extra attribute, so
        ``except GenerationError`` and ``err.code`` checks keep working.
        """
        wrapped = type(self).__new__(type(self))
        wrapped.__dict__.update(self.__dict__)
        wrapped.message = f"{prefix}: {self.message}"
        wrapped.args = (wrapped.message,)
        if kind is not None:
            wrapped.kind = kind
        if stage is not None:
            wrapped.stage = stage
        return wrapped


class ConfigurationError(LessonGenError):
    """Raised when settings are missing or invalid. Never retried."""


class GenerationError(LessonGenError):
    """Raised when the provider cannot produce text."""

    def __init__(
        self,
        message: str,
        code: GenerationErrorCode,
        last_cause: Optional[BaseException] = None,
        attempts: int = 0,
    ) -> None:
        super().__init__(message, code)
        self.last_cause = last_cause
        self.attempts = attempts


class ValidationError(LessonGenError):
    """Raised when provider output does not satisfy the content contract."""

    def __init__(
        self,
        message: str,
        code: ValidationErrorCode,
        details: Optional[List[str]] = None,
    ) -> None:
        super().__init__(message, code)
        self.details = details or []


class DomainError(LessonGenError):
    """Raised when a referenced entity does not exist."""

    def __init__(
        self,
        entity: str,
        entity_id: str,
        code: DomainErrorCode = DomainErrorCode.NOT_FOUND,
        message: Optional[str] = None,
    ) -> None:
        super().__init__(message or f"{entity} with id '{entity_id}' not found", code)
        self.entity = entity
        self.entity_id = entity_id


class PersistenceError(LessonGenError):
    """Raised when the content repository rejects a batch."""

    def __init__(self, message: str, code: PersistenceErrorCode = PersistenceErrorCode.SAVE_FAILED) -> None:
        super().__init__(message, code)
