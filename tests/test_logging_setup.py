"""
Logging Setup Tests
"""

import logging

import pytest

from session_client.logging_setup import SessionClientDebugFilter, configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_debug_filter_only_passes_library_debug():
    debug_filter = SessionClientDebugFilter()

    def record(name, level):
        return logging.LogRecord(name, level, __file__, 1, "msg", None, None)

    assert debug_filter.filter(record("session_client", logging.DEBUG))
    assert not debug_filter.filter(record("session_client", logging.INFO))
    assert not debug_filter.filter(record("httpx", logging.DEBUG))


def test_writes_info_and_debug_files(tmp_path, restore_root_logger):
    configure_logging(root=tmp_path, console_level=logging.CRITICAL)

    logging.getLogger("session_client").debug("refresh detail")
    logging.getLogger("session_client").info("refresh started")
    for handler in restore_root_logger.handlers:
        handler.flush()

    info_log = (tmp_path / "logs" / "session_client.log").read_text()
    debug_log = (tmp_path / "logs" / "session_client_debug.log").read_text()
    assert "refresh started" in info_log and "refresh detail" not in info_log
    assert "refresh detail" in debug_log and "refresh started" not in debug_log


def test_reconfiguring_replaces_handlers(tmp_path, restore_root_logger):
    before = len(restore_root_logger.handlers)

    configure_logging(root=tmp_path, console_level=logging.CRITICAL)
    configure_logging(root=tmp_path, console_level=logging.CRITICAL)

    assert len(restore_root_logger.handlers) == before + 3
