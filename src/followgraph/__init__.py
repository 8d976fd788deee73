"""
followgraph - Nostr follow graph analysis

This package maintains a graph of "follows" relationships between Nostr
identities and answers two questions about it:

- the degree of separation between two identities through mutual follows,
  with the connecting path
- a friends-of-friends recommendation ranking around one identity

Follow lists and profiles are pulled incrementally from a data source, so the
same graph can be shared by many queries.
"""

__version__ = "0.1.0"
__license__ = "See LICENSE file"

# Version compatibility check
import sys

if sys.version_info < (3, 12):
    raise RuntimeError("followgraph requires Python 3.12 or higher")

# Import commonly used components for easier access
from .config import NeighborhoodConfig, SearchConfig
from .core.graph import SocialGraph
from .core.identity import Identity
from .core.neighborhood import NeighborhoodBuilder
from .core.separation import SeparationSearch, find_separation, verify_path
from .infrastructure.datasource import FollowDataSource, InMemoryDataSource
from .infrastructure.event_source import EventFileSource

__all__ = [
    "SocialGraph",
    "Identity",
    "SeparationSearch",
    "find_separation",
    "verify_path",
    "NeighborhoodBuilder",
    "SearchConfig",
    "NeighborhoodConfig",
    "FollowDataSource",
    "InMemoryDataSource",
    "EventFileSource",
]
