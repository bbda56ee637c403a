import logging

import pytest

from context_tree.logging import get_logger, parse_log_level


@pytest.mark.unit
@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("debug", logging.DEBUG),
        ("INFO", logging.INFO),
        ("warn", logging.WARNING),
        ("Warning", logging.WARNING),
        ("ERROR", logging.ERROR),
        ("verbose", logging.INFO),
        ("", logging.INFO),
    ],
)
def test_parse_log_level(name: str, expected: int) -> None:
    assert parse_log_level(name) == expected


@pytest.mark.unit
def test_get_logger_returns_usable_logger() -> None:
    logger = get_logger()

    logger.debug("checking %s", "value")
