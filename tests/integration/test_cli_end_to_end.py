"""Integration tests for the generate_lesson CLI over a JSON store."""

import json
import logging
from unittest.mock import patch

import pytest

from lessongen.cli.generate_lesson import main, parse_args
from lessongen.utils.file_io import read_json, write_json

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def restore_logging():
    """configure_logging() replaces root handlers; put them back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def env(monkeypatch):
    for name in ("GEMINI_API_KEY", "OPENAI_API_KEY", "LESSONGEN_MODEL", "LESSONGEN_REQUEST_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LESSONGEN_API_KEY", "test-key")
    monkeypatch.setenv("LESSONGEN_RETRY_DELAY_MS", "0")


@pytest.fixture
def store_path(tmp_path):
    path = tmp_path / "lessons.json"
    write_json(
        {
            "levels": [{"id": "L1", "title": "A1 Beginner"}],
            "topics": [{"id": "T1", "title": "Family"}],
            "lessons": [
                {"id": "LES1", "user_id": "u1", "level_id": "L1", "topic_id": "T1", "title": "A1 Beginner: Family"}
            ],
        },
        path,
    )
    return path


@pytest.fixture
def fake_provider(service):
    with patch("lessongen.utils.generation_client.create_generation_service", return_value=service):
        yield service


def test_preview_writes_output_and_stores_nothing(env, fake_provider, store_path, tmp_path):
    """Test preview mode end to end."""
    output = tmp_path / "out" / "vocabulary.json"

    exit_code = main(
        ["--store", str(store_path), "--kind", "vocabulary", "--level-id", "L1", "--topic-id", "T1", "--output", str(output)]
    )

    assert exit_code == 0
    result = read_json(output)
    assert len(result["vocabulary"]) == 15
    assert all(item["id"] == "" and item["lessonId"] == "" for item in result["vocabulary"])
    assert "content" not in read_json(store_path)


def test_persist_all_kinds_for_lesson(env, fake_provider, store_path, capsys):
    """Test --kind all with --lesson-id stores every kind and prints JSON."""
    exit_code = main(
        ["--store", str(store_path), "--kind", "all", "--level-id", "L1", "--topic-id", "T1", "--lesson-id", "LES1"]
    )

    assert exit_code == 0
    printed = json.loads(capsys.readouterr().out)
    assert sorted(printed) == ["exercises", "grammar", "vocabulary"]

    content = read_json(store_path)["content"]
    assert len(content["vocabulary"]) == 15
    assert len(content["grammar"]) == 3
    assert len(content["exercises"]) == 5
    assert all(item["lessonId"] == "LES1" for item in content["exercises"])


def test_full_lesson(env, fake_provider, store_path, tmp_path):
    """Test full-lesson generation for a user."""
    output = tmp_path / "lesson.json"

    exit_code = main(
        [
            "--store", str(store_path),
            "--kind", "all",
            "--user-id", "u2",
            "--level-id", "L1",
            "--topic-id", "T1",
            "--output", str(output),
        ]
    )

    assert exit_code == 0
    result = read_json(output)
    assert result["lesson"]["status"] == "ready"
    assert result["lesson"]["title"] == "A1 Beginner: Family"
    assert result["lesson"]["difficulty"] == 1
    assert len(result["vocabulary"]) == 15
    assert fake_provider.generate.await_count == 3

    stored_lessons = {lesson["id"]: lesson for lesson in read_json(store_path)["lessons"]}
    assert stored_lessons[result["lesson"]["id"]]["status"] == "ready"


def test_regenerate_stored_lesson(env, fake_provider, store_path):
    exit_code = main(["--store", str(store_path), "--kind", "grammar", "--regenerate", "LES1"])

    assert exit_code == 0
    assert len(read_json(store_path)["content"]["grammar"]) == 3


def test_regenerate_missing_lesson_fails(env, fake_provider, store_path):
    exit_code = main(["--store", str(store_path), "--kind", "grammar", "--regenerate", "nope"])

    assert exit_code == 1
    fake_provider.generate.assert_not_called()


def test_missing_api_key_fails(env, monkeypatch, fake_provider, store_path):
    monkeypatch.setenv("LESSONGEN_API_KEY", "")

    exit_code = main(["--store", str(store_path), "--kind", "vocabulary", "--level-id", "L1", "--topic-id", "T1"])

    assert exit_code == 1
    fake_provider.generate.assert_not_called()


def test_unreadable_store_fails(env, fake_provider, tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")

    assert main(["--store", str(broken), "--kind", "vocabulary", "--level-id", "L1", "--topic-id", "T1"]) == 1


class TestParseArgs:
    """Test argument validation."""

    def test_level_and_topic_required(self, tmp_path):
        with pytest.raises(SystemExit):
            parse_args(["--store", str(tmp_path / "s.json"), "--kind", "vocabulary"])

    def test_user_id_requires_all(self, tmp_path):
        with pytest.raises(SystemExit):
            parse_args(
                ["--store", str(tmp_path / "s.json"), "--kind", "grammar", "--user-id", "u1", "--level-id", "L1", "--topic-id", "T1"]
            )

    def test_regenerate_without_level(self, tmp_path):
        args = parse_args(["--store", str(tmp_path / "s.json"), "--kind", "exercises", "--regenerate", "LES1"])
        assert args.regenerate == "LES1"
        assert args.level_id is None
