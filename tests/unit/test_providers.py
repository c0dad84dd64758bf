"""Unit tests for provider implementations with mocked SDK clients."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from lessongen.errors import ConfigurationError
from lessongen.utils.providers import (
    GeminiGenerationService,
    GenerationService,
    OpenAIGenerationService,
    create_generation_service,
    detect_provider,
)


class TestDetectProvider:
    """Test provider detection from model names."""

    @pytest.mark.parametrize(
        "model, provider",
        [
            ("gemini-1.5-pro", "gemini"),
            ("Gemini-2.0-flash", "gemini"),
            ("gpt-4o", "openai"),
            ("o3-mini", "openai"),
        ],
    )
    def test_known_models(self, model, provider):
        assert detect_provider(model) == provider

    def test_unknown_model(self):
        with pytest.raises(ConfigurationError):
            detect_provider("claude-3")

    @patch("lessongen.utils.providers.genai.Client")
    def test_create_gemini(self, mock_client):
        service = create_generation_service("gemini-1.5-pro", "key")
        assert isinstance(service, GeminiGenerationService)
        assert isinstance(service, GenerationService)
        mock_client.assert_called_once_with(api_key="key")


class TestGeminiGenerationService:
    """Test the Gemini provider."""

    @pytest.mark.asyncio
    @patch("lessongen.utils.providers.genai.Client")
    async def test_generate(self, mock_client_cls):
        mock_client = MagicMock()
        mock_client.aio.models.generate_content = AsyncMock(
            return_value=SimpleNamespace(
                text='{"vocabulary": []}',
                usage_metadata=SimpleNamespace(prompt_token_count=12, candidates_token_count=34),
            )
        )
        mock_client_cls.return_value = mock_client

        service = GeminiGenerationService(api_key="key")
        response = await service.generate("gemini-1.5-pro", "prompt", max_tokens=8192, temperature=0.7)

        assert response.text == '{"vocabulary": []}'
        assert response.prompt_tokens == 12
        assert response.completion_tokens == 34

        kwargs = mock_client.aio.models.generate_content.await_args.kwargs
        assert kwargs["model"] == "gemini-1.5-pro"
        assert kwargs["contents"] == "prompt"
        assert kwargs["config"].max_output_tokens == 8192
        assert kwargs["config"].temperature == 0.7

    @pytest.mark.asyncio
    @patch("lessongen.utils.providers.genai.Client")
    async def test_missing_usage(self, mock_client_cls):
        mock_client = MagicMock()
        mock_client.aio.models.generate_content = AsyncMock(
            return_value=SimpleNamespace(text=None, usage_metadata=None)
        )
        mock_client_cls.return_value = mock_client

        response = await GeminiGenerationService(api_key="key").generate("gemini-1.5-pro", "prompt")

        assert response.text is None
        assert response.prompt_tokens == 0


class TestOpenAIGenerationService:
    """Test the OpenAI provider."""

    def completion(self, content):
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
            usage=SimpleNamespace(prompt_tokens=5, completion_tokens=6),
        )

    @pytest.mark.asyncio
    @patch("lessongen.utils.providers.AsyncOpenAI")
    async def test_generate(self, mock_openai):
        mock_client = MagicMock()
        mock_client.chat.completions.create = AsyncMock(return_value=self.completion("hello"))
        mock_openai.return_value = mock_client

        response = await OpenAIGenerationService(api_key="key").generate(
            "gpt-4o", "prompt", max_tokens=100, temperature=0.3
        )

        assert response.text == "hello"
        assert response.completion_tokens == 6
        mock_openai.assert_called_once_with(api_key="key")
        mock_client.chat.completions.create.assert_awaited_once_with(
            model="gpt-4o",
            messages=[{"role": "user", "content": "prompt"}],
            max_tokens=100,
            temperature=0.3,
        )

    @pytest.mark.asyncio
    @patch("lessongen.utils.providers.AsyncOpenAI")
    async def test_reasoning_models_use_completion_tokens(self, mock_openai):
        mock_client = MagicMock()
        mock_client.chat.completions.create = AsyncMock(return_value=self.completion("hi"))
        mock_openai.return_value = mock_client

        await OpenAIGenerationService(api_key="key").generate("o3-mini", "prompt", max_tokens=100, temperature=0.3)

        kwargs = mock_client.chat.completions.create.await_args.kwargs
        assert kwargs["max_completion_tokens"] == 100
        assert "temperature" not in kwargs
        assert "max_tokens" not in kwargs
