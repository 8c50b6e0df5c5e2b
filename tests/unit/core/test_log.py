# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import io
import logging

import pytest

from remedy.core.config import RemedyConfig
from remedy.core.log import (
    FILE_HANDLER,
    ROOT_LOGGER_NAME,
    SCREEN_HANDLER,
    configure_from_config,
    configure_logging,
    more_logging,
)


@pytest.fixture(autouse=True)
def reset_logger():
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    saved = (list(logger.handlers), logger.level)
    yield
    for h in list(logger.handlers):
        if h not in saved[0]:
            logger.removeHandler(h)
            h.close()
    logger.setLevel(saved[1])


def _handler(name):
    for h in logging.getLogger(ROOT_LOGGER_NAME).handlers:
        if h.get_name() == name:
            return h
    return None


def test_screen_handler_only():
    stream = io.StringIO()
    logger = configure_logging("WARNING", stream=stream)

    assert _handler(SCREEN_HANDLER).level == logging.WARNING
    assert _handler(FILE_HANDLER) is None
    assert logger.level == logging.WARNING

    logging.getLogger("remedy.data._cache").warning("cache trouble")
    logging.getLogger("remedy.data._cache").info("quiet")
    assert stream.getvalue() == "remedy.data._cache: cache trouble\n"


def test_file_handler_lowers_logger_level(tmp_path):
    logfile = tmp_path / "remedy.log"
    logger = configure_logging(logging.ERROR, str(logfile), "INFO", stream=io.StringIO())

    assert _handler(FILE_HANDLER).level == logging.INFO
    assert logger.level == logging.INFO

    logging.getLogger("remedy.client").info("hello")
    _handler(FILE_HANDLER).flush()
    text = logfile.read_text()
    assert "INFO remedy.client: hello" in text
    assert text.startswith("[")


def test_reconfigure_replaces_handlers():
    configure_logging(stream=io.StringIO())
    configure_logging(stream=io.StringIO())
    names = [h.get_name() for h in logging.getLogger(ROOT_LOGGER_NAME).handlers]
    assert names.count(SCREEN_HANDLER) == 1


def test_unknown_level():
    with pytest.raises(ValueError):
        configure_logging("LOUD", stream=io.StringIO())


def test_more_logging_steps_down_to_debug():
    configure_logging("ERROR", stream=io.StringIO())

    assert more_logging(1) is True
    assert _handler(SCREEN_HANDLER).level == logging.WARNING
    more_logging(5)
    assert _handler(SCREEN_HANDLER).level == logging.DEBUG
    assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.DEBUG


def test_more_logging_zero_is_noop():
    configure_logging("ERROR", stream=io.StringIO())
    assert more_logging(0) is False
    assert _handler(SCREEN_HANDLER).level == logging.ERROR


def test_configure_from_config(tmp_path):
    config = RemedyConfig(debug_level="INFO", logfile=str(tmp_path / "x.log"), logfile_level="DEBUG")
    logger = configure_from_config(config)
    assert _handler(SCREEN_HANDLER).level == logging.INFO
    assert _handler(FILE_HANDLER).level == logging.DEBUG
    assert logger.level == logging.DEBUG
