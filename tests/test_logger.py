import logging

import pytest

from srbtranslit.app.utils import config
from srbtranslit.app.utils.config import Config, LoggingConfig
from srbtranslit.app.utils.logger import get_logger, setup_logging


@pytest.fixture(autouse=True)
def clean_handlers():
    yield
    root = logging.getLogger("srbtranslit")
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()


def test_module_loggers_hang_off_the_package_logger():
    assert get_logger("controller").name == "srbtranslit.controller"
    assert get_logger("controller").parent is logging.getLogger("srbtranslit")


def test_level_override():
    config._config = Config(logging=LoggingConfig(level="WARNING"))

    assert setup_logging().level == logging.WARNING
    assert setup_logging("debug").level == logging.DEBUG


def test_repeated_setup_does_not_stack_handlers():
    config._config = Config()
    setup_logging()
    logger = setup_logging()
    assert len(logger.handlers) == 1


def test_file_handler_creates_missing_directories(tmp_path):
    log_path = tmp_path / "logs" / "nested" / "srb.log"
    config._config = Config(logging=LoggingConfig(file_path=str(log_path)))

    logger = setup_logging()
    get_logger("test").info("Ћирилица у логу")
    for handler in logger.handlers:
        handler.flush()

    assert "Ћирилица у логу" in log_path.read_text(encoding="utf-8")
