"""
Configuration for the search and ranking algorithms.

Both classes are plain dataclasses validated on construction. Defaults match
the values the algorithms were tuned with: contact lists are requested 300
authors at a time during a separation search and 2000 at a time while
building neighborhood levels.
"""

from dataclasses import dataclass
from typing import Optional

from .core.exceptions import ConfigurationError

DEFAULT_SEARCH_BATCH_SIZE = 300
DEFAULT_MAX_ROUNDS = 7
DEFAULT_VERIFY_ATTEMPTS = 3
DEFAULT_LEVEL_BATCH_SIZE = 2000
DEFAULT_LEVEL_FETCH_TIMEOUT = 20.0


def _require_positive(name: str, value: Optional[float]) -> None:
    if value is not None and value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")


@dataclass
class SearchConfig:
    """
    Configuration for degree-of-separation searches.

    Attributes:
        batch_size: Maximum number of identities per contact list fetch
        max_rounds: Number of frontier expansions before giving up
        fetch_timeout: Timeout in seconds for each fetch, None for no timeout
        refresh_after: Age in seconds after which a recorded follow list is
            refetched; None means any recorded list is fresh enough
        verify_attempts: Number of re-runs when a found path fails verification
        backoff_base: Delay in seconds before the first re-run, doubled after
            every failed attempt
        backoff_max: Upper bound for the re-run delay
    """

    batch_size: int = DEFAULT_SEARCH_BATCH_SIZE
    max_rounds: int = DEFAULT_MAX_ROUNDS
    fetch_timeout: Optional[float] = None
    refresh_after: Optional[float] = None
    verify_attempts: int = DEFAULT_VERIFY_ATTEMPTS
    backoff_base: float = 0.5
    backoff_max: float = 30.0

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.batch_size < 1:
            raise ConfigurationError(f"batch_size must be at least 1, got {self.batch_size}")
        if self.max_rounds < 0:
            raise ConfigurationError(f"max_rounds must be non-negative, got {self.max_rounds}")
        if self.verify_attempts < 0:
            raise ConfigurationError(
                f"verify_attempts must be non-negative, got {self.verify_attempts}"
            )
        if self.backoff_base < 0 or self.backoff_max < 0:
            raise ConfigurationError("backoff delays must be non-negative")
        _require_positive("fetch_timeout", self.fetch_timeout)
        _require_positive("refresh_after", self.refresh_after)

    def backoff_delay(self, attempt: int) -> float:
        """Delay before re-run number ``attempt`` (0-based)."""
        return min(self.backoff_base * (2**attempt), self.backoff_max)


@dataclass
class NeighborhoodConfig:
    """
    Configuration for ego-centric neighborhood building.

    Attributes:
        level_batch_size: Maximum number of identities per fetch
        fetch_timeout: Timeout in seconds for each fetch, None for no timeout
    """

    level_batch_size: int = DEFAULT_LEVEL_BATCH_SIZE
    fetch_timeout: Optional[float] = DEFAULT_LEVEL_FETCH_TIMEOUT

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.level_batch_size < 1:
            raise ConfigurationError(
                f"level_batch_size must be at least 1, got {self.level_batch_size}"
            )
        _require_positive("fetch_timeout", self.fetch_timeout)
