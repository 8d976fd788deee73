"""
Data models for the follow graph.

This module defines the value types exchanged between the graph, the search
algorithms and the data sources:

- FollowEdge: handle for a directed "following" edge
- Profile: descriptive metadata published by an identity
- ProfileRecord / ContactListRecord: fetched records with their timestamps
- SeparationResult / RankedIdentity: algorithm results
"""

import json
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from .identity import Identity

# Unix seconds
Timestamp = int


class EdgeKind(Enum):
    """Kinds of relationship stored in the graph."""

    FOLLOWING = auto()


class ProfileStatus(Enum):
    """Cache state of an identity's profile."""

    UNKNOWN = auto()  # never queried
    MISSING = auto()  # queried, none found
    PRESENT = auto()


@dataclass(frozen=True)
class FollowEdge:
    """
    Handle for a directed edge between two graph nodes.

    Attributes:
        source (int): Arena index of the follower
        target (int): Arena index of the followee
        kind (EdgeKind): Relationship label
    """

    source: int
    target: int
    kind: EdgeKind = EdgeKind.FOLLOWING


@dataclass
class Profile:
    """
    Descriptive metadata associated with an identity.

    Attributes:
        name (Optional[str]): Short handle
        display_name (Optional[str]): Human readable name
        about (Optional[str]): Free-text biography
        picture (Optional[str]): Avatar URL
        nip05 (Optional[str]): DNS-based verification identifier
        lud16 (Optional[str]): Lightning address
        website (Optional[str]): Personal website
        extra (Dict[str, Any]): Fields not covered above
    """

    name: Optional[str] = None
    display_name: Optional[str] = None
    about: Optional[str] = None
    picture: Optional[str] = None
    nip05: Optional[str] = None
    lud16: Optional[str] = None
    website: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN_FIELDS = ("name", "display_name", "about", "picture", "nip05", "lud16", "website")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Profile":
        """Build a profile from a decoded metadata object."""
        if not isinstance(data, dict):
            raise ValueError("profile metadata must be a JSON object")
        known = {}
        extra = {}
        for key, value in data.items():
            if key in cls._KNOWN_FIELDS:
                known[key] = value if isinstance(value, str) else None
            else:
                extra[key] = value
        # Older clients publish "displayName"
        if known.get("display_name") is None and isinstance(extra.get("displayName"), str):
            known["display_name"] = extra.pop("displayName")
        return cls(**known, extra=extra)

    @classmethod
    def from_json(cls, content: str) -> "Profile":
        """
        Parse the JSON content of a metadata event.

        Raises:
            ValueError: If the content is not a JSON object
        """
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid profile JSON: {e.msg}") from e
        return cls.from_dict(data)

    @property
    def label(self) -> Optional[str]:
        """Best name to show for this profile."""
        return self.name or self.display_name or None


class ProfileRecord(NamedTuple):
    """A profile together with the creation time of the record it came from."""

    profile: Profile
    created_at: Timestamp


class ContactListRecord(NamedTuple):
    """An identity's follow list together with the record's creation time."""

    contacts: Tuple[Identity, ...]
    created_at: Timestamp


class SeparationResult(NamedTuple):
    """Degree of separation and the mutual-follow path realising it."""

    degree: int
    path: List[Identity]

    @property
    def bech32_path(self) -> List[str]:
        """Path encoded as ``npub1...`` strings."""
        return [identity.to_bech32() for identity in self.path]


class RankedIdentity(NamedTuple):
    """A recommendation candidate with its rank and the mutuals behind it."""

    identity: Identity
    rank: int
    reasons: Tuple[Identity, ...]
