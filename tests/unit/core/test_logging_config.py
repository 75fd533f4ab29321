# tests/unit/core/test_logging_config.py
import logging

from app.core.logging_config import NOISY_LOGGERS, configure_logging


def test_app_loggers_follow_requested_level():
    level = configure_logging("debug")

    assert level == logging.DEBUG
    assert logging.getLogger("app").level == logging.DEBUG
    for name in NOISY_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING


def test_unknown_level_falls_back_to_info():
    assert configure_logging("chatty") == logging.INFO
    assert logging.getLogger("app").level == logging.INFO
