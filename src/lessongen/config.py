"""Runtime configuration for the generation client.

Values come from environment variables (a ``.env`` file is loaded first via
python-dotenv). Settings are read once at process start and shared
read-only by every generation call.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from lessongen.errors import ConfigurationError

DEFAULT_MODEL = "gemini-1.5-pro"


class GenerationSettings(BaseModel):
    """Provider and retry settings.

    ``max_tokens`` and ``temperature`` are passed through to the provider and
    never affect control flow.
    """

    api_key: Optional[str] = Field(default=None, repr=False)
    model: str = DEFAULT_MODEL
    max_tokens: int = 8192
    temperature: float = 0.7
    max_retries: int = 3
    retry_delay_ms: int = Field(default=1000, description="Linear backoff unit in milliseconds")
    request_timeout_seconds: Optional[float] = Field(
        default=None, description="Overall deadline for one generate() call, including retries"
    )

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "GenerationSettings":
        """Build settings from ``LESSONGEN_*`` environment variables.

        Args:
            env_file: Optional .env path (default: python-dotenv lookup)

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        load_dotenv(env_file)

        api_key = (
            os.getenv("LESSONGEN_API_KEY")
            or os.getenv("GEMINI_API_KEY")
            or os.getenv("OPENAI_API_KEY")
        )

        return cls(
            api_key=api_key,
            model=os.getenv("LESSONGEN_MODEL", DEFAULT_MODEL),
            max_tokens=_parse_env("LESSONGEN_MAX_TOKENS", int, 8192),
            temperature=_parse_env("LESSONGEN_TEMPERATURE", float, 0.7),
            max_retries=_parse_env("LESSONGEN_MAX_RETRIES", int, 3),
            retry_delay_ms=_parse_env("LESSONGEN_RETRY_DELAY_MS", int, 1000),
            request_timeout_seconds=_parse_env("LESSONGEN_REQUEST_TIMEOUT", float, None),
        )


def _parse_env(name: str, parser, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return parser(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {name}: {raw!r}") from e
