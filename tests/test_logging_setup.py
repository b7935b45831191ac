import logging
import os

import pytest

from diagnostics import logging_setup


@pytest.fixture(autouse=True)
def _restore_loggers():
    yield
    for name in ("shell_core", "shell_bus"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            if isinstance(handler, logging_setup.ShellLogHandler):
                logger.removeHandler(handler)
                handler.close()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)


def test_configure_logging_writes_kv_lines(tmp_path) -> None:
    info = logging_setup.configure_logging(tmp_path)
    logging.getLogger("shell_core.compose").warning("placeholder for tool:c/x")
    for handler in logging_setup.get_logger().handlers:
        handler.flush()

    assert info["format"] == "kv"
    assert info["log_path"] == str(tmp_path / "logs" / "metashell.log")
    log_text = (tmp_path / "logs" / "metashell.log").read_text(encoding="utf-8")
    assert "level=WARNING" in log_text
    assert "logger=shell_core.compose" in log_text
    assert "msg=placeholder for tool:c/x" in log_text


def test_reconfigure_replaces_handler(tmp_path) -> None:
    logging_setup.configure_logging(tmp_path / "one")
    logging_setup.configure_logging(tmp_path / "two")
    handlers = [h for h in logging.getLogger("shell_bus").handlers if isinstance(h, logging_setup.ShellLogHandler)]
    assert len(handlers) == 1
    assert handlers[0].baseFilename == os.path.abspath(tmp_path / "two" / "logs" / "metashell.log")


def test_debug_level_is_configurable(tmp_path) -> None:
    logging_setup.configure_logging(tmp_path, level=logging.DEBUG)
    assert logging.getLogger("shell_core").level == logging.DEBUG
    assert logging_setup.get_logger().name == "shell_core"


def test_reconfigure_leaves_foreign_handlers_alone(tmp_path) -> None:
    foreign = logging.FileHandler(tmp_path / "other.log", encoding="utf-8")
    logger = logging.getLogger("shell_core")
    logger.addHandler(foreign)
    try:
        logging_setup.configure_logging(tmp_path / "one")
        logging_setup.configure_logging(tmp_path / "two")
        assert foreign in logger.handlers
        owned = [h for h in logger.handlers if isinstance(h, logging_setup.ShellLogHandler)]
        assert len(owned) == 1
    finally:
        logger.removeHandler(foreign)
        foreign.close()
