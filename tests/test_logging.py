"""Tests for compmeta logging setup."""

from __future__ import annotations

import logging

import pytest

from compmeta.logging import configure_logging, console_level, get_logger


@pytest.fixture
def reset_compmeta_logger():
    yield
    logger = logging.getLogger("compmeta")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.mark.parametrize(
    ("verbose", "quiet", "expected"),
    [
        (False, False, logging.INFO),
        (True, False, logging.DEBUG),
        (False, True, logging.WARNING),
        (True, True, logging.DEBUG),
    ],
)
def test_console_level(verbose: bool, quiet: bool, expected: int) -> None:
    assert console_level(verbose=verbose, quiet=quiet) == expected


def test_get_logger_uses_compmeta_hierarchy() -> None:
    assert get_logger().name == "compmeta"
    assert get_logger("pipeline").name == "compmeta.pipeline"


def test_log_file_records_debug_even_when_console_is_quiet(tmp_path, reset_compmeta_logger) -> None:
    log_file = tmp_path / "logs" / "nested" / "compmeta.log"

    logger = configure_logging(quiet=True, log_file=log_file)
    get_logger("pipeline").debug("per-file detail")
    for handler in logger.handlers:
        handler.flush()

    assert logger.handlers[0].level == logging.WARNING
    assert "per-file detail" in log_file.read_text(encoding="utf-8")


def test_configure_logging_replaces_previous_handlers(reset_compmeta_logger) -> None:
    configure_logging()
    logger = configure_logging(verbose=True)

    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
