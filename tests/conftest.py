"""Shared fixtures: seeded catalog, provider payloads and a scripted provider."""

import json
from unittest.mock import AsyncMock

import pytest

from lessongen.config import GenerationSettings
from lessongen.repositories.memory import InMemoryCatalog
from lessongen.utils.generation_client import GenerationClient
from lessongen.utils.providers import GenerationResponse
from lessongen.validators.schema import Lesson, LessonStatus, Level, Topic


def make_vocabulary_payload(count: int = 15) -> dict:
    return {
        "vocabulary": [
            {
                "word": f"word{i}",
                "pronunciation": f"/wɜːd{i}/",
                "translation": f"palabra{i}",
                "definition": f"definition of word {i}",
                "example": f"This sentence uses word{i}.",
                "partOfSpeech": "noun",
                "difficulty": 1,
            }
            for i in range(count)
        ]
    }


def make_grammar_payload(count: int = 3) -> dict:
    return {
        "grammar": [
            {
                "title": f"Concept {i}",
                "explanation": "Used for habits and general truths",
                "rule": "Subject + base verb",
                "examples": ["I work every day.", "She likes coffee.", "They play."],
                "commonMistakes": ["'He work' instead of 'He works'"],
                "tips": ["He/She/It + verb+s"],
            }
            for i in range(count)
        ]
    }


def make_exercises_payload() -> dict:
    return {
        "exercises": [
            {
                "type": "fill-blank",
                "question": "My _____ is a doctor.",
                "correctAnswer": "mother",
                "explanation": "Family noun.",
                "difficulty": 1,
            },
            {
                "type": "fill-blank",
                "question": "I have two _____.",
                "correctAnswer": "brothers",
                "explanation": "Plural noun.",
                "difficulty": 1,
            },
            {
                "type": "multiple-choice",
                "question": "Which word means the father of your father?",
                "options": ["uncle", "grandfather", "cousin"],
                "correctAnswer": "grandfather",
                "explanation": "Grandfather is the parent of a parent.",
                "difficulty": 2,
            },
            {
                "type": "multiple-choice",
                "question": "Which sentence is correct?",
                "options": ["She have a sister.", "She has a sister."],
                "correctAnswer": "She has a sister.",
                "explanation": "Third person singular uses 'has'.",
                "difficulty": 2,
            },
            {
                "type": "translation",
                "question": "Translate: 'mi familia'",
                "correctAnswer": "my family",
                "explanation": "Direct translation.",
                "difficulty": 1,
            },
        ]
    }


def payload_for_prompt(prompt: str) -> dict:
    """Pick the payload whose top-level key the prompt asks for."""
    if '"vocabulary": [' in prompt:
        return make_vocabulary_payload()
    if '"grammar": [' in prompt:
        return make_grammar_payload()
    return make_exercises_payload()


@pytest.fixture
def vocabulary_payload():
    return make_vocabulary_payload()


@pytest.fixture
def grammar_payload():
    return make_grammar_payload()


@pytest.fixture
def exercises_payload():
    return make_exercises_payload()


@pytest.fixture
def settings():
    """Settings with a test key and no backoff wait."""
    return GenerationSettings(api_key="test-key", max_retries=3, retry_delay_ms=0)


@pytest.fixture
def service():
    """Provider mock answering each prompt with a valid payload for its kind."""

    async def answer(model, prompt, max_tokens=None, temperature=None):
        return GenerationResponse(
            text=json.dumps(payload_for_prompt(prompt)),
            prompt_tokens=10,
            completion_tokens=20,
        )

    mock = AsyncMock()
    mock.generate.side_effect = answer
    return mock


@pytest.fixture
def client(settings, service):
    return GenerationClient(settings, service=service)


@pytest.fixture
def catalog():
    """Catalog with level L1 (Beginner), topic T1 (Family) and lesson LES1."""
    catalog = InMemoryCatalog()
    catalog.add_level(Level(id="L1", title="Beginner"))
    catalog.add_topic(Topic(id="T1", title="Family"))
    catalog.add_lesson(
        Lesson(
            id="LES1",
            user_id="owner-1",
            level_id="L1",
            topic_id="T1",
            title="Beginner: Family",
            status=LessonStatus.READY,
        )
    )
    return catalog
