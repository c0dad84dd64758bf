"""CLI for lesson content generation.

Usage:
    python -m lessongen.cli.generate_lesson \
        --store data/lessons.json \
        --kind vocabulary \
        --level-id L1 \
        --topic-id T1 \
        --lesson-id LES1 \
        --output output/vocabulary.json

Modes:
- Preview (no --lesson-id): print validated items, nothing is stored
- Persist (--lesson-id): store items for an existing lesson
- Regenerate (--regenerate LESSON_ID): generate again for a stored lesson
- Full lesson (--kind all --user-id USER): create a lesson with all content

The provider key and retry settings come from LESSONGEN_* environment
variables (a .env file is honoured).
"""

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from tqdm import tqdm

from lessongen.config import GenerationSettings
from lessongen.errors import LessonGenError
from lessongen.generators.content_orchestrator import ContentOrchestrator, Persist, Preview
from lessongen.repositories.json_store import JsonLessonStore
from lessongen.utils.file_io import write_json
from lessongen.utils.generation_client import GenerationClient
from lessongen.utils.logging_config import configure_logging
from lessongen.validators.schema import ContentKind

logger = logging.getLogger(__name__)

KIND_CHOICES = [kind.value for kind in ContentKind] + ["all"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Generate vocabulary, grammar and exercises for English lessons",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Preview vocabulary for a level/topic (nothing is stored)
  python -m lessongen.cli.generate_lesson \\
      --store data/lessons.json \\
      --kind vocabulary --level-id L1 --topic-id T1

  # Generate and store grammar for an existing lesson
  python -m lessongen.cli.generate_lesson \\
      --store data/lessons.json \\
      --kind grammar --level-id L1 --topic-id T1 --lesson-id LES1

  # Regenerate exercises of a stored lesson
  python -m lessongen.cli.generate_lesson \\
      --store data/lessons.json \\
      --kind exercises --regenerate LES1

  # Build a complete lesson for a user
  python -m lessongen.cli.generate_lesson \\
      --store data/lessons.json \\
      --kind all --user-id U1 --level-id L1 --topic-id T1 \\
      --output output/lesson.json
        """,
    )

    parser.add_argument(
        "--store",
        required=True,
        type=Path,
        help="JSON store holding levels, topics, lessons and content",
    )
    parser.add_argument(
        "--kind",
        required=True,
        choices=KIND_CHOICES,
        help="Content kind to generate (all = vocabulary, grammar and exercises)",
    )
    parser.add_argument(
        "--level-id",
        help="Level identifier",
    )
    parser.add_argument(
        "--topic-id",
        help="Topic identifier",
    )
    parser.add_argument(
        "--lesson-id",
        help="Store generated items for this lesson (default: preview only)",
    )
    parser.add_argument(
        "--regenerate",
        metavar="LESSON_ID",
        help="Regenerate content of a stored lesson (level/topic come from the lesson)",
    )
    parser.add_argument(
        "--user-id",
        help="With --kind all: create a full lesson owned by this user",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the result JSON to this file (default: stdout)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args(argv)

    if args.regenerate:
        if args.user_id:
            parser.error("--regenerate cannot be combined with --user-id")
    elif not args.level_id or not args.topic_id:
        parser.error("--level-id and --topic-id are required unless --regenerate is given")
    if args.user_id and args.kind != "all":
        parser.error("--user-id requires --kind all")

    return args


def build_orchestrator(store: JsonLessonStore, client: GenerationClient) -> ContentOrchestrator:
    """Wire the orchestrator to a JSON store."""
    return ContentOrchestrator(
        level_lookup=store.level_lookup,
        topic_lookup=store.topic_lookup,
        lesson_lookup=store.lesson_lookup,
        repository=store,
        generation_client=client,
        lesson_store=store,
    )


def _dump_items(items) -> List[Dict[str, Any]]:
    return [item.model_dump(mode="json", by_alias=True) for item in items]


async def run(args: argparse.Namespace, orchestrator: ContentOrchestrator) -> Dict[str, Any]:
    """Execute the requested operation and return a JSON-ready result."""
    if args.user_id:
        content = await orchestrator.generate_lesson(args.user_id, args.level_id, args.topic_id)
        return content.model_dump(mode="json", by_alias=True)

    kinds = list(ContentKind) if args.kind == "all" else [ContentKind(args.kind)]
    result: Dict[str, Any] = {}

    for kind in tqdm(kinds, desc="Generating", disable=len(kinds) == 1):
        if args.regenerate:
            items = await orchestrator.regenerate(kind, args.regenerate)
        else:
            items = await orchestrator.generate(
                kind,
                args.level_id,
                args.topic_id,
                Persist(args.lesson_id) if args.lesson_id else Preview(),
            )
        result[kind.value] = _dump_items(items)

    return result


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entrypoint. Returns the process exit code."""
    args = parse_args(argv)

    configure_logging(level=args.log_level)

    try:
        store = JsonLessonStore(args.store)
    except (OSError, ValueError) as e:
        logger.error(f"Could not load store {args.store}: {e}")
        return 1

    start_time = time.time()
    try:
        settings = GenerationSettings.from_env()
        client = GenerationClient(settings)
        orchestrator = build_orchestrator(store, client)
        result = asyncio.run(run(args, orchestrator))
    except LessonGenError as e:
        logger.error(f"Generation failed: {e}")
        return 1

    if args.output:
        write_json(result, args.output)
    else:
        print(json.dumps(result, indent=2, ensure_ascii=False))

    usage = client.get_usage_summary()
    logger.info("=" * 60)
    logger.info("GENERATION SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Duration: {time.time() - start_time:.1f}s")
    logger.info(f"Model: {usage['model']}")
    logger.info(f"Total tokens: {usage['total_tokens']} (prompt {usage['prompt_tokens']}, completion {usage['completion_tokens']})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
