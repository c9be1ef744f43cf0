# tests/unit/test_logging_config.py

from __future__ import annotations
import logging
import sys
from pathlib import Path
import pytest

# Make "src" importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from dify_dispatch.logging_config import init_logging, LOG_FILENAME


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


def test_console_only(restore_root_logger):
    assert init_logging("debug") is None
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1


def test_file_handler_writes(tmp_path: Path, restore_root_logger):
    path = init_logging("INFO", log_dir=tmp_path / "logs")
    assert path == tmp_path / "logs" / LOG_FILENAME

    logging.getLogger("dify_dispatch.test").info("dispatched")
    for h in logging.getLogger().handlers:
        h.flush()
    assert "dispatched" in path.read_text(encoding="utf-8")
    # aiohttp chatter stays at WARNING
    assert logging.getLogger("aiohttp").level == logging.WARNING
