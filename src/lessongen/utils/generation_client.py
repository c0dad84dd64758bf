"""Generation client with retry logic around a generative AI provider.

This module obtains raw text from a ``GenerationService``, retrying
transient failures (provider exceptions and empty responses) with a linear
backoff, and logs request/response metadata (prompt hash, latency, tokens).
"""

import asyncio
import hashlib
import logging
import time
from typing import Optional

from pydantic import BaseModel

from lessongen.config import GenerationSettings
from lessongen.errors import ConfigurationError, GenerationError, GenerationErrorCode
from lessongen.utils.providers import GenerationService, create_generation_service

logger = logging.getLogger(__name__)


class TokenUsage(BaseModel):
    """Token usage statistics."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class GenerationClient:
    """Raw-text generation with bounded sequential retries.

    Features:
    - Eager API key check (ConfigurationError, never retried)
    - Up to ``max_retries`` strictly sequential attempts
    - Linear backoff: sleeps ``retry_delay_ms * attempt`` after failed attempt ``attempt``
    - Empty provider text counts as a failed attempt
    - Optional overall deadline surfaced as GenerationError(TIMEOUT)
    - Token usage tracking and request/response logging
    """

    def __init__(
        self,
        settings: GenerationSettings,
        service: Optional[GenerationService] = None,
    ):
        """Initialize the client.

        Args:
            settings: Provider, retry and pass-through settings
            service: Provider implementation (default: detected from settings.model)

        Raises:
            ConfigurationError: If the API key is missing or retry settings are invalid
        """
        if not settings.api_key or not settings.api_key.strip():
            raise ConfigurationError("Generation API key is not configured (set LESSONGEN_API_KEY)")
        if settings.max_retries < 1:
            raise ConfigurationError(f"max_retries must be >= 1, got {settings.max_retries}")
        if settings.retry_delay_ms < 0:
            raise ConfigurationError(f"retry_delay_ms must be >= 0, got {settings.retry_delay_ms}")

        self.settings = settings
        self.model = settings.model
        self.max_retries = settings.max_retries
        self.retry_delay_ms = settings.retry_delay_ms
        self.request_timeout_seconds = settings.request_timeout_seconds

        self.service = service or create_generation_service(settings.model, settings.api_key)

        # Token tracking
        self.total_usage = TokenUsage()

        logger.info(
            f"GenerationClient initialized with model={self.model}, "
            f"max_retries={self.max_retries}, retry_delay_ms={self.retry_delay_ms}"
        )

    async def generate(self, prompt: str) -> str:
        """Return the provider's raw text for ``prompt``.

        Args:
            prompt: Instruction text

        Returns:
            Non-empty provider text

        Raises:
            GenerationError: EXHAUSTED when every attempt failed, TIMEOUT when
                the overall deadline expired first
        """
        prompt_hash = self._hash_prompt(prompt)
        logger.info(f"Generating text: model={self.model}, prompt_hash={prompt_hash}")

        if self.request_timeout_seconds is None:
            return await self._generate_with_retries(prompt, prompt_hash)

        try:
            async with asyncio.timeout(self.request_timeout_seconds):
                return await self._generate_with_retries(prompt, prompt_hash)
        except TimeoutError as e:
            logger.error(
                f"Generation timed out after {self.request_timeout_seconds}s for prompt_hash={prompt_hash}"
            )
            raise GenerationError(
                f"Generation timed out after {self.request_timeout_seconds}s",
                GenerationErrorCode.TIMEOUT,
                last_cause=e,
            ) from e

    async def _generate_with_retries(self, prompt: str, prompt_hash: str) -> str:
        last_exception: Optional[BaseException] = None
        for attempt in range(1, self.max_retries + 1):
            start_time = time.monotonic()
            try:
                response = await self.service.generate(
                    model=self.model,
                    prompt=prompt,
                    max_tokens=self.settings.max_tokens,
                    temperature=self.settings.temperature,
                )
                if not response.text or not response.text.strip():
                    raise GenerationError(
                        "Provider returned an empty response",
                        GenerationErrorCode.EMPTY_RESPONSE,
                        attempts=attempt,
                    )

                latency_ms = (time.monotonic() - start_time) * 1000
                usage = self._update_total_usage(response.prompt_tokens, response.completion_tokens)
                self._log_response(prompt_hash, latency_ms, attempt, success=True, usage=usage)
                return response.text

            except Exception as e:
                last_exception = e
                latency_ms = (time.monotonic() - start_time) * 1000

                logger.warning(f"Attempt {attempt}/{self.max_retries} failed: {str(e)[:200]}")
                self._log_response(prompt_hash, latency_ms, attempt, success=False, error=str(e)[:200])

                if attempt < self.max_retries:
                    delay = self._calculate_backoff_delay(attempt)
                    logger.info(f"Retrying in {delay:.2f} seconds...")
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"All {self.max_retries} attempts failed for prompt_hash={prompt_hash}")

        raise GenerationError(
            f"Generation failed after {self.max_retries} attempts. Last error: {last_exception}",
            GenerationErrorCode.EXHAUSTED,
            last_cause=last_exception,
            attempts=self.max_retries,
        ) from last_exception

    def _calculate_backoff_delay(self, attempt: int) -> float:
        """Calculate linear backoff delay.

        Args:
            attempt: Attempt that just failed (1-indexed)

        Returns:
            Delay in seconds before the next attempt (``retry_delay_ms * attempt`` ms)
        """
        return self.retry_delay_ms * attempt / 1000

    def _update_total_usage(self, prompt_tokens: int, completion_tokens: int) -> TokenUsage:
        usage = TokenUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )
        self.total_usage.prompt_tokens += usage.prompt_tokens
        self.total_usage.completion_tokens += usage.completion_tokens
        self.total_usage.total_tokens += usage.total_tokens
        return usage

    def get_usage_summary(self) -> dict:
        """Get summary of total token usage."""
        return {
            "model": self.model,
            "prompt_tokens": self.total_usage.prompt_tokens,
            "completion_tokens": self.total_usage.completion_tokens,
            "total_tokens": self.total_usage.total_tokens,
        }

    def reset_usage(self) -> None:
        """Reset token usage counters."""
        self.total_usage = TokenUsage()

    def _hash_prompt(self, prompt: str) -> str:
        """Return the first 16 characters of the prompt's SHA256 hash."""
        return hashlib.sha256(prompt.encode()).hexdigest()[:16]

    def _log_response(
        self,
        prompt_hash: str,
        latency_ms: float,
        attempt: int,
        success: bool,
        usage: Optional[TokenUsage] = None,
        error: Optional[str] = None,
    ) -> None:
        log_data = {
            "prompt_hash": prompt_hash,
            "model": self.model,
            "latency_ms": round(latency_ms, 2),
            "attempt": attempt,
            "success": success,
        }

        if usage:
            log_data["tokens"] = {
                "prompt": usage.prompt_tokens,
                "completion": usage.completion_tokens,
                "total": usage.total_tokens,
            }

        if error:
            log_data["error"] = error

        if success:
            logger.info(f"LLM response: {log_data}")
        else:
            logger.warning(f"LLM response failed: {log_data}")
