"""
Lesson Content Generation

This package generates English-learning lesson content (vocabulary, grammar
concepts and exercises) for a level and topic with a generative AI provider,
validates the output against strict schemas and persists it per lesson.

**Version**: 0.1.0
**Python**: >=3.11
**Key Dependencies**: pydantic, google-genai, openai, python-dotenv
"""

__version__ = "0.1.0"
