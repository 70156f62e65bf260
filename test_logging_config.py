"""
Tests for init_logging and its filters.
"""

import logging
import os

import pytest

from room_annotator import logging_config


@pytest.fixture
def fresh_logging(monkeypatch):
    """Let init_logging run again and undo its handlers afterwards."""
    monkeypatch.setattr(logging_config, '_LOGGING_INITIALIZED', False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_console_only(fresh_logging):
    assert logging_config.init_logging() is None
    assert logging_config._LOGGING_INITIALIZED


def test_log_file_and_cleanup(fresh_logging, tmp_path):
    for i in range(4):
        old = tmp_path / f"room_annotator_2020010{i}_000000.log"
        old.write_text("old")
        os.utime(old, (1_000_000 + i, 1_000_000 + i))
    (tmp_path / "unrelated.log").write_text("keep")

    log_file = logging_config.init_logging(log_dir=tmp_path, keep_count=3)

    assert log_file is not None and log_file.exists()
    remaining = sorted(p.name for p in tmp_path.glob("room_annotator_*.log"))
    assert len(remaining) == 3
    assert "room_annotator_20200103_000000.log" in remaining
    assert "room_annotator_20200100_000000.log" not in remaining
    assert (tmp_path / "unrelated.log").exists()

    # Second call is a no-op
    assert logging_config.init_logging(log_dir=tmp_path) is None


def make_record(name, level, func):
    return logging.LogRecord(name, level, __file__, 1, "message", None, None, func=func)


def test_pointer_move_filter():
    pointer_filter = logging_config._SuppressPointerMoveFilter()
    name = "room_annotator.core.interaction_handler"
    assert not pointer_filter.filter(make_record(name, logging.DEBUG, "pointer_move"))
    assert pointer_filter.filter(make_record(name, logging.DEBUG, "_begin"))
    assert pointer_filter.filter(make_record(name, logging.WARNING, "pointer_move"))


def test_library_debug_filter():
    library_filter = logging_config._SuppressLibraryDebugFilter()
    assert not library_filter.filter(make_record("matplotlib.font_manager", logging.DEBUG, "f"))
    assert not library_filter.filter(make_record("PIL.PngImagePlugin", logging.DEBUG, "f"))
    assert library_filter.filter(make_record("matplotlib.font_manager", logging.WARNING, "f"))
    assert library_filter.filter(make_record("room_annotator.core", logging.DEBUG, "f"))
