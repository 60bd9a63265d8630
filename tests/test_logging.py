"""Tests for logging setup."""

import logging
import sys

from openai_shim.logging import LOGGER_NAME, setup_logging


def test_setup_logging_installs_single_stdout_handler():
    logger = setup_logging()
    setup_logging()

    assert logger.name == LOGGER_NAME
    assert len(logger.handlers) == 1
    handler = logger.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    assert handler.stream is sys.stdout


def test_setup_logging_accepts_level_names():
    assert setup_logging("debug").level == logging.DEBUG
    assert setup_logging("not-a-level").level == logging.INFO
    setup_logging()
