"""Prompts for lesson content generation.

One builder per content kind plus ``build_prompt`` which dispatches on the
kind. Builders are pure: the same (kind, level, topic) always yields the
same string. Level and topic titles are embedded verbatim.
"""

from typing import Callable, Dict, Union

from lessongen.validators.schema import ContentKind, Level, Topic

VOCABULARY_ITEM_COUNT = 15
GRAMMAR_CONCEPT_COUNT = 3
EXERCISE_COUNTS = {
    "fill-blank": 2,
    "multiple-choice": 2,
    "translation": 1,
}
EXERCISE_ITEM_COUNT = sum(EXERCISE_COUNTS.values())

DEFAULT_TRANSLATION_LANGUAGE = "Spanish"

JSON_ONLY_INSTRUCTION = (
    "Respond ONLY with a single valid JSON object matching the format above. "
    "Do not wrap it in markdown code fences and do not add any text before or after it."
)


VOCABULARY_PROMPT_TEMPLATE = """Generate {count} English vocabulary words for the topic "{topic}" at level "{level}".
For each word include:
- The English word
- Phonetic pronunciation (IPA)
- Translation into {translation_language}
- A simple English definition
- An example sentence using the word in context
- Part of speech (one of: noun, verb, adjective, adverb, preposition, other)
- Difficulty level (integer from 1 to 5)

Response format (JSON):
{{
  "vocabulary": [
    {{
      "word": "example",
      "pronunciation": "/ɪɡˈzæmpəl/",
      "translation": "ejemplo",
      "definition": "a thing characteristic of its kind",
      "example": "This is a good example of modern art.",
      "partOfSpeech": "noun",
      "difficulty": 3
    }}
  ]
}}

The "vocabulary" array must contain exactly {count} items.
{json_only}"""


GRAMMAR_PROMPT_TEMPLATE = """Explain {count} grammar concepts relevant to the topic "{topic}" at level "{level}".
For each concept include:
- The concept title
- A clear, simple explanation
- The specific grammar rule
- At least 3 practical examples
- Common mistakes to avoid
- Tips to remember it

Response format (JSON):
{{
  "grammar": [
    {{
      "title": "Present Simple",
      "explanation": "Used for habits and general truths",
      "rule": "Subject + base verb (+ s/es for 3rd person)",
      "examples": [
        "I work every day.",
        "She likes coffee.",
        "The sun rises in the east."
      ],
      "commonMistakes": [
        "Forgetting 's' in 3rd person: 'He work' -> 'He works'"
      ],
      "tips": [
        "Remember: I/You/We/They + verb, He/She/It + verb+s"
      ]
    }}
  ]
}}

The "grammar" array must contain exactly {count} items. Every list must contain at least one non-empty string.
{json_only}"""


EXERCISES_PROMPT_TEMPLATE = """Create {count} interactive exercises to practice "{topic}" at level "{level}":
{breakdown}

For each exercise include:
- Exercise type (one of: fill-blank, multiple-choice, translation, matching, ordering)
- The question or instruction
- Options (only when applicable)
- The correct answer (a string, or a list of strings for matching/ordering)
- An explanation of the answer
- Difficulty level (integer from 1 to 5)

Response format (JSON):
{{
  "exercises": [
    {{
      "type": "fill-blank",
      "question": "I _____ to work every day.",
      "correctAnswer": "go",
      "explanation": "Present simple for daily habits uses the base verb.",
      "difficulty": 2
    }},
    {{
      "type": "multiple-choice",
      "question": "Which sentence is correct?",
      "options": [
        "She go to school.",
        "She goes to school.",
        "She going to school."
      ],
      "correctAnswer": "She goes to school.",
      "explanation": "Third person singular requires the 's' ending.",
      "difficulty": 3
    }}
  ]
}}

The "exercises" array must contain exactly {count} items.
{json_only}"""


def _exercise_breakdown() -> str:
    return "\n".join(
        f"- {count} {exercise_type} exercise{'s' if count > 1 else ''}"
        for exercise_type, count in EXERCISE_COUNTS.items()
    )


def build_vocabulary_prompt(
    level: Level,
    topic: Topic,
    translation_language: str = DEFAULT_TRANSLATION_LANGUAGE,
) -> str:
    """Build the vocabulary generation prompt."""
    return VOCABULARY_PROMPT_TEMPLATE.format(
        count=VOCABULARY_ITEM_COUNT,
        topic=topic.title,
        level=level.title,
        translation_language=translation_language,
        json_only=JSON_ONLY_INSTRUCTION,
    )


def build_grammar_prompt(level: Level, topic: Topic) -> str:
    """Build the grammar generation prompt."""
    return GRAMMAR_PROMPT_TEMPLATE.format(
        count=GRAMMAR_CONCEPT_COUNT,
        topic=topic.title,
        level=level.title,
        json_only=JSON_ONLY_INSTRUCTION,
    )


def build_exercises_prompt(level: Level, topic: Topic) -> str:
    """Build the exercise generation prompt."""
    return EXERCISES_PROMPT_TEMPLATE.format(
        count=EXERCISE_ITEM_COUNT,
        topic=topic.title,
        level=level.title,
        breakdown=_exercise_breakdown(),
        json_only=JSON_ONLY_INSTRUCTION,
    )


PROMPT_BUILDERS: Dict[ContentKind, Callable[[Level, Topic], str]] = {
    ContentKind.VOCABULARY: build_vocabulary_prompt,
    ContentKind.GRAMMAR: build_grammar_prompt,
    ContentKind.EXERCISES: build_exercises_prompt,
}


def build_prompt(kind: Union[ContentKind, str], level: Level, topic: Topic) -> str:
    """Build the generation prompt for ``kind``.

    Args:
        kind: Content kind (vocabulary, grammar, exercises)
        level: Target proficiency level
        topic: Lesson topic

    Returns:
        Instruction string asking for a single JSON object of the kind's shape
    """
    return PROMPT_BUILDERS[ContentKind(kind)](level, topic)
