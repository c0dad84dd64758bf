"""Lookups and content storage used by the orchestrator.

- base.py: Protocol interfaces
- memory.py: In-process implementation (tests, working set)
- json_store.py: JSON-file backed implementation (CLI)
"""

from lessongen.repositories.json_store import JsonLessonStore
from lessongen.repositories.memory import InMemoryCatalog

__all__ = [
    "InMemoryCatalog",
    "JsonLessonStore",
]
