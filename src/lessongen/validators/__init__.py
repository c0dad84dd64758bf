"""Content schemas and provider-response validation."""

from lessongen.validators.response_validator import ResponseValidator
from lessongen.validators.schema import ContentKind

__all__ = [
    "ContentKind",
    "ResponseValidator",
]
