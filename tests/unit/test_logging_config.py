"""
Unit tests for logging configuration.
"""

import logging
import os

import pytest

from petmap.core.logging_config import (
    LOG_FILENAME,
    get_logger,
    resolve_log_level,
    setup_logging,
)


@pytest.fixture
def restore_root_logger(monkeypatch):
    monkeypatch.delenv("PETMAP_LOG_LEVEL", raising=False)
    monkeypatch.delenv("PETMAP_LOG_DIR", raising=False)
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_writes_file(tmp_path, restore_root_logger):
    """setup_logging creates the log file and honours debug mode."""
    log_path = setup_logging(debug_mode=True, log_to_console=False, log_dir=str(tmp_path))

    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert log_path == os.path.join(str(tmp_path), LOG_FILENAME)

    get_logger("petmap.test").debug("hello from test")
    root.handlers[0].flush()

    contents = (tmp_path / LOG_FILENAME).read_text(encoding="utf-8")
    assert "PetMap Session Started" in contents
    assert "Map engine stack: PySide6" in contents
    assert "hello from test" in contents


def test_setup_logging_replaces_handlers(tmp_path, restore_root_logger):
    """Calling setup twice does not duplicate handlers."""
    setup_logging(log_to_console=True, log_dir=str(tmp_path))
    setup_logging(log_to_console=True, log_dir=str(tmp_path))

    root = restore_root_logger
    assert root.level == logging.INFO
    assert len(root.handlers) == 2


def test_log_dir_from_environment(tmp_path, monkeypatch, restore_root_logger):
    """PETMAP_LOG_DIR is used when no directory is passed."""
    log_dir = tmp_path / "session-logs"
    monkeypatch.setenv("PETMAP_LOG_DIR", str(log_dir))

    log_path = setup_logging(log_to_console=False)

    assert log_path == os.path.join(str(log_dir), LOG_FILENAME)
    assert (log_dir / LOG_FILENAME).exists()


@pytest.mark.parametrize(
    "debug_mode, env, expected",
    [
        (False, {}, logging.INFO),
        (True, {"PETMAP_LOG_LEVEL": "ERROR"}, logging.DEBUG),
        (False, {"PETMAP_LOG_LEVEL": "warning"}, logging.WARNING),
        (False, {"PETMAP_LOG_LEVEL": "chatty"}, logging.INFO),
    ],
)
def test_resolve_log_level(debug_mode, env, expected):
    """--debug wins, then PETMAP_LOG_LEVEL, then INFO."""
    assert resolve_log_level(debug_mode, env) == expected
