"""Structural validation of raw provider output.

The provider's text is untrusted: it must parse as a single JSON object and
satisfy the response model of the requested content kind. Anything else is
rejected with a typed ``ValidationError``; nothing is repaired or coerced.
"""

import json
import logging
from typing import Any, List, Union

import pydantic

from lessongen.errors import ValidationError, ValidationErrorCode
from lessongen.validators.schema import (
    RESPONSE_MODELS,
    ContentKind,
    ContentResponse,
)

logger = logging.getLogger(__name__)


class ResponseValidator:
    """Parse and validate provider text for one content kind. No I/O."""

    def validate(self, kind: Union[ContentKind, str], raw_text: Any) -> ContentResponse:
        """Validate ``raw_text`` against the contract of ``kind``.

        Args:
            kind: Content kind whose schema applies
            raw_text: Raw provider output

        Returns:
            VocabularyResponse, GrammarResponse or ExerciseResponse

        Raises:
            ValidationError: MALFORMED_JSON if the text is not JSON,
                SCHEMA_VIOLATION if the JSON breaks the schema
        """
        kind = ContentKind(kind)
        payload = self.parse_json(raw_text)

        model = RESPONSE_MODELS[kind]
        try:
            response = model.model_validate(payload)
        except pydantic.ValidationError as e:
            details = format_validation_details(e)
            logger.warning(
                f"Provider output violates {kind.value} schema: {len(details)} error(s)",
                extra={"kind": kind.value, "details": details[:10]},
            )
            raise ValidationError(
                f"{kind.value} response violates schema: {'; '.join(details[:5])}",
                ValidationErrorCode.SCHEMA_VIOLATION,
                details=details,
            ) from e

        logger.debug(f"Validated {kind.value} response with {len(getattr(response, kind.value))} items")
        return response

    @staticmethod
    def parse_json(raw_text: Any) -> Any:
        """Decode provider text as JSON.

        Raises:
            ValidationError: MALFORMED_JSON on non-string input or decode failure
        """
        if not isinstance(raw_text, (str, bytes, bytearray)):
            raise ValidationError(
                f"Expected JSON text, got {type(raw_text).__name__}",
                ValidationErrorCode.MALFORMED_JSON,
            )
        try:
            return json.loads(raw_text)
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
            raise ValidationError(
                f"Provider output is not valid JSON: {e}",
                ValidationErrorCode.MALFORMED_JSON,
                details=[str(e)],
            ) from e


def format_validation_details(error: pydantic.ValidationError) -> List[str]:
    """Flatten pydantic errors into ``"<location>: <message>"`` strings."""
    details = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"]) or "<root>"
        details.append(f"{location}: {err['msg']}")
    return details
