"""
Shared utilities for lesson generation.

- generation_client.py: Provider calls with linear-backoff retries and token tracking
- providers.py: Gemini and OpenAI implementations of GenerationService
- file_io.py: Atomic JSON reading/writing
- logging_config.py: Structured JSON logging and per-task log context
"""

__all__ = [
    "generation_client",
    "providers",
    "file_io",
    "logging_config",
]
