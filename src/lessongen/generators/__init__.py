"""Content generation orchestration."""

from lessongen.generators.content_orchestrator import (
    ContentOrchestrator,
    GenerationStage,
    Persist,
    Preview,
)

__all__ = [
    "ContentOrchestrator",
    "GenerationStage",
    "Persist",
    "Preview",
]
