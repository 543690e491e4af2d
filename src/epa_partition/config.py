"""
Configuration management for EPA Partition.

Loads configuration from environment variables (typically from a .env file).
Uses python-dotenv to load .env automatically.

Usage:
    from epa_partition.config import config

    strategy = config.permutation_strategy
    level = config.log_level

The permutation strategy read here is only a default. Every function that
builds a permutation also accepts the strategy explicitly.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

from .algorithms.permutation import PermutationStrategy

# Look for .env in project root (parent of src/)
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

PERMUTATION_ENV_VAR = "EPA_PERMUTATION"
LOG_LEVEL_ENV_VAR = "EPA_LOG_LEVEL"


class Config:
    """
    Application configuration loaded from environment variables.

    Values are read on access rather than at import, so a bad value only
    fails the code path that needs it.
    """

    @property
    def permutation_strategy(self) -> PermutationStrategy:
        """
        Permutation strategy named by ``EPA_PERMUTATION``.

        Returns:
            The parsed strategy, ``PermutationStrategy.SHUFFLE`` when unset

        Raises:
            ValueError: If the variable holds an unrecognized value
        """
        raw = os.getenv(PERMUTATION_ENV_VAR, "")
        if not raw.strip():
            return PermutationStrategy.SHUFFLE
        try:
            return PermutationStrategy.parse(raw)
        except ValueError as e:
            raise ValueError(
                f"{PERMUTATION_ENV_VAR}={raw!r} is not a recognized permutation strategy.\n"
                f"{_get_strategy_instructions()}"
            ) from e

    @property
    def log_level(self) -> str:
        """Logging level name from ``EPA_LOG_LEVEL`` (default WARNING)."""
        return os.getenv(LOG_LEVEL_ENV_VAR, "WARNING").upper()


# Global config instance
config = Config()


def _get_strategy_instructions() -> str:
    """Get environment variable instructions for the permutation strategy."""
    return """
  EPA_PERMUTATION=shuffle          # uniform random order (default)
  EPA_PERMUTATION=nearest          # greedy nearest-neighbor path
  EPA_PERMUTATION=random-nearest   # similarity-weighted random path
    """
