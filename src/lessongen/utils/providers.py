"""Generative AI providers behind the ``GenerationService`` interface.

A provider turns (model, prompt) into raw text. It does not retry, parse or
validate; ``GenerationClient`` owns retries and ``ResponseValidator`` owns
the contract.

Supported providers (detected from the model name):
- gemini-*: Google Gen AI SDK (google-genai)
- gpt-*, o1/o3/o4: OpenAI SDK
"""

import logging
from typing import Optional, Protocol, runtime_checkable

from google import genai
from google.genai import types
from openai import AsyncOpenAI
from pydantic import BaseModel

from lessongen.errors import ConfigurationError

logger = logging.getLogger(__name__)


class GenerationResponse(BaseModel):
    """Raw provider output with optional token accounting."""

    text: Optional[str] = None
    prompt_tokens: int = 0
    completion_tokens: int = 0


@runtime_checkable
class GenerationService(Protocol):
    """External generation provider: request{model, prompt} -> response{text}."""

    async def generate(
        self,
        model: str,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> GenerationResponse: ...


class GeminiGenerationService:
    """Gemini models through the async surface of ``google.genai.Client``."""

    def __init__(self, api_key: str):
        self._client = genai.Client(api_key=api_key)

    async def generate(
        self,
        model: str,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> GenerationResponse:
        response = await self._client.aio.models.generate_content(
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(
                max_output_tokens=max_tokens,
                temperature=temperature,
            ),
        )

        usage = getattr(response, "usage_metadata", None)
        return GenerationResponse(
            text=response.text,
            prompt_tokens=getattr(usage, "prompt_token_count", None) or 0,
            completion_tokens=getattr(usage, "candidates_token_count", None) or 0,
        )


class OpenAIGenerationService:
    """OpenAI chat models through ``openai.AsyncOpenAI``."""

    def __init__(self, api_key: str):
        self._client = AsyncOpenAI(api_key=api_key)

    async def generate(
        self,
        model: str,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> GenerationResponse:
        api_params = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
        }

        # gpt-5 and o* models take max_completion_tokens and only the default temperature
        if model.startswith("gpt-5") or model.startswith("o"):
            if max_tokens is not None:
                api_params["max_completion_tokens"] = max_tokens
        else:
            if max_tokens is not None:
                api_params["max_tokens"] = max_tokens
            if temperature is not None:
                api_params["temperature"] = temperature

        response = await self._client.chat.completions.create(**api_params)

        text = response.choices[0].message.content if response.choices else None
        usage = getattr(response, "usage", None)
        return GenerationResponse(
            text=text,
            prompt_tokens=getattr(usage, "prompt_tokens", None) or 0,
            completion_tokens=getattr(usage, "completion_tokens", None) or 0,
        )


def detect_provider(model: str) -> str:
    """Detect provider name ('gemini' or 'openai') from a model name.

    Raises:
        ConfigurationError: If the model prefix is not recognised
    """
    model_lower = model.lower()
    if model_lower.startswith("gemini"):
        return "gemini"
    if model_lower.startswith(("gpt", "o1", "o3", "o4")):
        return "openai"
    raise ConfigurationError(f"Unsupported model: {model}")


def create_generation_service(model: str, api_key: str) -> GenerationService:
    """Instantiate the provider that serves ``model``."""
    provider = detect_provider(model)
    logger.info(f"Using {provider} provider for model={model}")
    if provider == "gemini":
        return GeminiGenerationService(api_key=api_key)
    return OpenAIGenerationService(api_key=api_key)
