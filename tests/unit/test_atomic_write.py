"""Unit tests for atomic_write function."""

import logging

import pytest
import structlog
from structlog.testing import LogCapture

from prompt_composer.services.file_operations import atomic_write


class TestAtomicWrite:
    """Test atomic_write temp-file-rename behaviour."""

    def test_atomic_write_creates_new_file(self, tmp_path):
        """Test that atomic_write creates a new file successfully."""
        target = tmp_path / "prompt_response.txt"

        atomic_write(target, "The answer")

        assert target.read_text() == "The answer"

    def test_atomic_write_overwrites_existing_file(self, tmp_path):
        """Test that atomic_write overwrites existing file."""
        target = tmp_path / "existing.txt"
        target.write_text("Old content")

        atomic_write(target, "New content")

        assert target.read_text() == "New content"

    def test_atomic_write_creates_parent_directories(self, tmp_path):
        target = tmp_path / ".prompt-composer" / "responses" / "out.txt"

        atomic_write(target, "x")

        assert target.read_text() == "x"

    def test_atomic_write_leaves_no_temp_file(self, tmp_path):
        target = tmp_path / "out.txt"

        atomic_write(target, "x")

        assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]

    def test_atomic_write_cleans_up_on_failure(self, tmp_path, monkeypatch):
        """Test the original file survives a failed rename."""
        target = tmp_path / "out.txt"
        target.write_text("original")

        def failing_replace(src, dst):
            raise OSError("rename failed")

        monkeypatch.setattr("prompt_composer.services.file_operations.os.replace", failing_replace)

        with pytest.raises(OSError, match="rename failed"):
            atomic_write(target, "new")

        assert target.read_text() == "original"
        assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]


class TestAtomicWriteLogging:
    """Test atomic_write events reach the configured structlog pipeline."""

    @pytest.fixture
    def captured(self):
        capture = LogCapture()
        structlog.configure(
            processors=[capture],
            wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
            cache_logger_on_first_use=False,
        )
        yield capture
        structlog.reset_defaults()
        structlog.configure(
            wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
            cache_logger_on_first_use=False,
        )

    def test_success_logged(self, tmp_path, captured):
        atomic_write(tmp_path / "out.txt", "abc")

        assert [e["event"] for e in captured.entries] == ["companion_atomic_write_done"]
        assert captured.entries[0]["size"] == 3

    def test_failure_logged_as_error(self, tmp_path, captured, monkeypatch):
        def failing_replace(src, dst):
            raise OSError("rename failed")

        monkeypatch.setattr("prompt_composer.services.file_operations.os.replace", failing_replace)

        with pytest.raises(OSError):
            atomic_write(tmp_path / "out.txt", "abc")

        assert captured.entries[0]["event"] == "companion_atomic_write_failed"
        assert captured.entries[0]["log_level"] == "error"
