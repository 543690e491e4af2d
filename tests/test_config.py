"""
Tests for configuration and logging setup.
"""

import logging

import pytest

from epa_partition.algorithms.permutation import PermutationStrategy
from epa_partition.config import Config
from epa_partition.utils.logging_config import PACKAGE_LOGGER, get_logger, setup_logging


def test_default_strategy(monkeypatch):
    """Unset or blank EPA_PERMUTATION means uniform shuffle."""
    monkeypatch.delenv("EPA_PERMUTATION", raising=False)
    assert Config().permutation_strategy is PermutationStrategy.SHUFFLE
    monkeypatch.setenv("EPA_PERMUTATION", "  ")
    assert Config().permutation_strategy is PermutationStrategy.SHUFFLE


@pytest.mark.parametrize(
    "value, expected",
    [
        ("shuffle", PermutationStrategy.SHUFFLE),
        ("uniform-shuffle", PermutationStrategy.SHUFFLE),
        ("nearest", PermutationStrategy.NEAREST),
        ("randomnearest", PermutationStrategy.RANDOM_NEAREST),
        ("random-nearest", PermutationStrategy.RANDOM_NEAREST),
    ],
)
def test_strategy_from_env(monkeypatch, value, expected):
    """Recognized names map onto strategies."""
    monkeypatch.setenv("EPA_PERMUTATION", value)
    assert Config().permutation_strategy is expected


def test_unknown_strategy(monkeypatch):
    """Unknown names raise with instructions."""
    monkeypatch.setenv("EPA_PERMUTATION", "farthest")
    with pytest.raises(ValueError, match="EPA_PERMUTATION"):
        Config().permutation_strategy


def test_log_level(monkeypatch):
    """Log level defaults to WARNING and is upper-cased."""
    monkeypatch.delenv("EPA_LOG_LEVEL", raising=False)
    assert Config().log_level == "WARNING"
    monkeypatch.setenv("EPA_LOG_LEVEL", "debug")
    assert Config().log_level == "DEBUG"


def test_get_logger_namespacing():
    """Loggers hang off the package logger."""
    assert get_logger("epa_partition.algorithms.epa").name == "epa_partition.algorithms.epa"
    assert get_logger("scripts").name == "epa_partition.scripts"
    assert get_logger().name == PACKAGE_LOGGER


def test_setup_logging_idempotent():
    """Repeated setup installs one handler and updates the level."""
    logger = setup_logging("INFO")
    n_handlers = len(logger.handlers)
    logger = setup_logging(logging.DEBUG)
    assert len(logger.handlers) == n_handlers
    assert logger.level == logging.DEBUG


def test_setup_logging_rejects_unknown_level():
    """Unknown level names raise ValueError."""
    with pytest.raises(ValueError, match="Unknown log level"):
        setup_logging("chatty")


def test_setup_logging_reads_env(monkeypatch):
    """Without an explicit level, EPA_LOG_LEVEL is used."""
    monkeypatch.setenv("EPA_LOG_LEVEL", "error")
    assert setup_logging().level == logging.ERROR
