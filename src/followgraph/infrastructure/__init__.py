"""Data sources feeding the follow graph."""

from .datasource import FollowDataSource, InMemoryDataSource
from .event_source import EventFileSource

__all__ = ["EventFileSource", "FollowDataSource", "InMemoryDataSource"]
