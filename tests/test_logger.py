import logging

from pinyin_converter.utils.logger import setup_logger


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv("PINYIN_LOG_LEVEL", "debug")
    logger = setup_logger("pinyin_converter.test_env")
    assert logger.level == logging.DEBUG
    assert logger.propagate is False


def test_handlers_are_not_duplicated():
    first = setup_logger("pinyin_converter.test_once", level="WARNING")
    count = len(first.handlers)
    second = setup_logger("pinyin_converter.test_once", level=logging.INFO)
    assert second is first
    assert len(second.handlers) == count >= 1
    assert second.level == logging.INFO


def test_request_libraries_are_quietened():
    setup_logger("pinyin_converter.test_quiet")
    assert logging.getLogger("urllib3").level == logging.WARNING
