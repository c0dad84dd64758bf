"""Unit tests for file I/O functions."""

import json
from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from lessongen.utils.file_io import read_json, write_json


class TestJSONFunctions:
    """Test JSON read/write functions."""

    def test_write_and_read_json(self, tmp_path):
        """Test writing and reading JSON files."""
        data = {"word": "family", "difficulty": 1, "examples": ["My family is big."]}
        file_path = tmp_path / "test.json"

        write_json(data, file_path)
        assert file_path.exists()
        assert read_json(file_path) == data

    def test_write_json_creates_directories(self, tmp_path):
        """Test that write_json creates parent directories."""
        file_path = tmp_path / "subdir1" / "subdir2" / "test.json"

        write_json({"key": "value"}, file_path)
        assert read_json(file_path) == {"key": "value"}

    def test_write_json_with_unicode(self, tmp_path):
        """Test that non-ASCII text is written unescaped."""
        data = {"pronunciation": "/ˈfæməli/", "translation": "familia, café"}
        file_path = tmp_path / "unicode.json"

        write_json(data, file_path)

        content = file_path.read_text(encoding="utf-8")
        assert "/ˈfæməli/" in content
        assert read_json(file_path) == data

    def test_write_json_serializes_datetimes(self, tmp_path):
        """Test that values json cannot encode natively fall back to str()."""
        created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
        file_path = tmp_path / "dates.json"

        write_json({"created_at": created}, file_path)
        assert read_json(file_path) == {"created_at": str(created)}

    def test_read_json_nonexistent_file(self, tmp_path):
        """Test reading non-existent JSON file raises error."""
        with pytest.raises(FileNotFoundError):
            read_json(tmp_path / "nonexistent.json")

    def test_read_json_invalid(self, tmp_path):
        file_path = tmp_path / "broken.json"
        file_path.write_text("{not json", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            read_json(file_path)


class TestAtomicWrite:
    """Test that a failed write never leaves a partial file behind."""

    def test_failed_write_keeps_previous_content(self, tmp_path):
        file_path = tmp_path / "store.json"
        write_json({"version": 1}, file_path)

        with patch("lessongen.utils.file_io.os.replace", side_effect=OSError("rename failed")):
            with pytest.raises(OSError):
                write_json({"version": 2}, file_path)

        assert read_json(file_path) == {"version": 1}
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]

    def test_unserializable_data_cleans_temp_file(self, tmp_path):
        file_path = tmp_path / "store.json"

        with pytest.raises(ValueError):
            write_json({"loop": _circular()}, file_path)

        assert list(tmp_path.iterdir()) == []


def _circular():
    data = {}
    data["self"] = data
    return data
