"""
Custom exceptions for the follow graph system.

This module defines the hierarchy of exceptions raised by the search and
ranking algorithms and by the data sources feeding them. Graph operations
themselves never raise; everything here signals either malformed input, a
query that cannot be answered, or a failure of an external collaborator.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .identity import Identity


class FollowGraphError(Exception):
    """Base class for every error raised by followgraph."""


class ParseError(FollowGraphError, ValueError):
    """
    Raised when identity text cannot be decoded.

    Parsing is purely local, so retrying with the same input never helps.

    Examples:
        * Hex key of the wrong length
        * Bech32 string with a bad checksum
        * Bech32 string with an unexpected prefix
    """

    def __str__(self) -> str:
        """Format parse error message."""
        return f"Parse Error: {super().__str__()}"


class ConfigurationError(FollowGraphError):
    """
    Raised when configuration is invalid.

    Examples:
        * Non-positive batch size
        * Negative round cap
        * Negative backoff delay
    """


class DataSourceError(FollowGraphError):
    """
    Raised when a data source cannot answer a fetch.

    Wraps transport failures, timeouts and unreadable event dumps so that
    callers only deal with one error type per collaborator. The caller decides
    whether to retry or abort.
    """


class SeparationError(FollowGraphError):
    """Base class for errors raised while computing degrees of separation."""


class MissingContactListError(SeparationError):
    """
    Raised when a search target never published a contact list.

    Without the target's own follow list the search has no border to start
    from, so the whole search fails rather than returning a partial path.
    """

    def __init__(self, identity: "Identity"):
        self.identity = identity
        super().__init__(f"Missing contact list of {identity}")


class SeparationNotFoundError(SeparationError):
    """Raised when the round cap is exhausted without the two sides meeting."""

    def __init__(self, message: str = "Separation not found"):
        super().__init__(message)


class PathVerificationError(SeparationError):
    """
    Raised when a found path keeps failing verification.

    Graph data is fetched asynchronously and can change between discovery and
    use; after the configured number of re-runs the result is abandoned.
    """


class TooFewArgumentsError(SeparationError):
    """Raised when a request carries fewer identity references than required."""

    def __init__(self, message: str = "Too few arguments"):
        super().__init__(message)


class TooManyArgumentsError(SeparationError):
    """Raised when a request carries more identity references than required."""

    def __init__(self, message: str = "Too many arguments"):
        super().__init__(message)


class NeighborhoodError(FollowGraphError):
    """Base class for errors raised by the ego-centric neighborhood builder."""


class LevelNotPresentError(NeighborhoodError):
    """Raised when an operation targets a level that has not been built yet."""

    def __init__(self, level: int):
        self.level = level
        super().__init__(f"Level {level} is not in the network")


class NotEnoughLevelsError(NeighborhoodError):
    """Raised when ranking is requested before levels 0, 1 and 2 exist."""

    def __init__(self, message: str = "Not enough levels"):
        super().__init__(message)
