"""Core follow graph functionality."""

from .exceptions import (
    ConfigurationError,
    DataSourceError,
    FollowGraphError,
    LevelNotPresentError,
    MissingContactListError,
    NeighborhoodError,
    NotEnoughLevelsError,
    ParseError,
    PathVerificationError,
    SeparationError,
    SeparationNotFoundError,
    TooFewArgumentsError,
    TooManyArgumentsError,
)
from .identity import Identity
from .models import (
    ContactListRecord,
    EdgeKind,
    FollowEdge,
    Profile,
    ProfileRecord,
    ProfileStatus,
    RankedIdentity,
    SeparationResult,
)
from .graph import SocialGraph
from .map_intersect import intersect, intersect_map

__all__ = [
    "ConfigurationError",
    "ContactListRecord",
    "DataSourceError",
    "EdgeKind",
    "FollowEdge",
    "FollowGraphError",
    "Identity",
    "LevelNotPresentError",
    "MissingContactListError",
    "NeighborhoodError",
    "NotEnoughLevelsError",
    "ParseError",
    "PathVerificationError",
    "Profile",
    "ProfileRecord",
    "ProfileStatus",
    "RankedIdentity",
    "SeparationError",
    "SeparationNotFoundError",
    "SeparationResult",
    "SocialGraph",
    "TooFewArgumentsError",
    "TooManyArgumentsError",
    "intersect",
    "intersect_map",
]
