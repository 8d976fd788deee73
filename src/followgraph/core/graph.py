"""
Core social graph data structure with arena-indexed adjacency.

This module provides the SocialGraph class that stores identities and their
"following" relationships. Nodes live in an arena addressed by integer
handles, with an auxiliary identity->handle map; adjacency is kept in both
directions so that followers and mutuals can be answered without scanning the
graph. The graph also caches per-identity profile records and the time each
identity's follow list was last (re)established.

Every public operation acquires the graph lock for its own duration only.
Callers that need several reads to observe one consistent state wrap them in
``locked()``. No operation performs I/O and no operation raises for unknown
identities.
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import RLock
from typing import Dict, Generator, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

from .identity import Identity
from .models import EdgeKind, FollowEdge, Profile, ProfileRecord, ProfileStatus, Timestamp


def now() -> Timestamp:
    """Current time in Unix seconds."""
    return int(time.time())


@dataclass
class GraphState:
    """Encapsulates the state of a social graph."""

    nodes: List[Identity] = field(default_factory=list)
    index: Dict[Identity, int] = field(default_factory=dict)
    outgoing: List[Dict[int, FollowEdge]] = field(default_factory=list)
    incoming: List[Set[int]] = field(default_factory=list)
    follow_updates: Dict[Identity, Timestamp] = field(default_factory=dict)
    profiles: Dict[Identity, Optional[ProfileRecord]] = field(default_factory=dict)
    edge_count: int = 0


class ContactView:
    """
    Lazy, restartable view over an identity's outgoing follows.

    Each iteration reads the graph afresh, so the view reflects contact list
    updates made after it was created.
    """

    def __init__(self, graph: "SocialGraph", identity: Identity):
        self._graph = graph
        self._identity = identity

    def __iter__(self) -> Iterator[Identity]:
        return iter(self._graph._contacts_snapshot(self._identity))

    def __len__(self) -> int:
        return self._graph.get_degree(self._identity)

    def __contains__(self, other: object) -> bool:
        return isinstance(other, Identity) and self._graph.is_following(self._identity, other)

    def __repr__(self) -> str:
        return f"ContactView({self._identity!r}, {len(self)} contacts)"


class SocialGraph:
    """
    Directed graph of identities and "following" edges plus a profile cache.

    Attributes:
        _state (GraphState): Internal state of the graph
        _state_lock (RLock): Lock for thread-safe state access
    """

    def __init__(self):
        self._state = GraphState()
        self._state_lock = RLock()

    @contextmanager
    def locked(self) -> Generator["SocialGraph", None, None]:
        """Hold the graph lock across several operations."""
        with self._state_lock:
            yield self

    def add_identity(self, identity: Identity) -> Tuple[int, bool]:
        """
        Add an identity to the graph.

        Returns:
            Tuple[int, bool]: The node handle, and whether the node was created
        """
        with self._state_lock:
            handle = self._state.index.get(identity)
            if handle is not None:
                return handle, False

            handle = len(self._state.nodes)
            self._state.nodes.append(identity)
            self._state.index[identity] = handle
            self._state.outgoing.append({})
            self._state.incoming.append(set())
            return handle, True

    def contains(self, identity: Identity) -> bool:
        """Check if an identity exists in the graph."""
        with self._state_lock:
            return identity in self._state.index

    def __contains__(self, identity: object) -> bool:
        return isinstance(identity, Identity) and self.contains(identity)

    def __len__(self) -> int:
        return self.node_count()

    def handle_of(self, identity: Identity) -> Optional[int]:
        """Get the arena handle of an identity, if present."""
        with self._state_lock:
            return self._state.index.get(identity)

    def identity_at(self, handle: int) -> Optional[Identity]:
        """Get the identity stored at an arena handle, if any."""
        with self._state_lock:
            if 0 <= handle < len(self._state.nodes):
                return self._state.nodes[handle]
            return None

    def add_follow(self, user: Identity, follow: Identity) -> FollowEdge:
        """
        Record that ``user`` follows ``follow``.

        Missing nodes are created. Adding an edge that already exists returns
        the existing edge. Either way ``user``'s last follow update is refreshed.
        """
        with self._state_lock:
            source = self.add_identity(user)[0]
            target = self.add_identity(follow)[0]
            edge = self._add_follow_nodes(source, target)
            self._state.follow_updates[user] = now()
            return edge

    def _add_follow_nodes(self, source: int, target: int) -> FollowEdge:
        """Add an edge between two existing handles."""
        edges = self._state.outgoing[source]
        edge = edges.get(target)
        if edge is None:
            edge = FollowEdge(source, target, EdgeKind.FOLLOWING)
            edges[target] = edge
            self._state.incoming[target].add(source)
            self._state.edge_count += 1
        return edge

    def remove_contact_list(self, user: Identity) -> None:
        """Remove every outgoing "following" edge of ``user``."""
        with self._state_lock:
            source = self._state.index.get(user)
            if source is None:
                return
            edges = self._state.outgoing[source]
            for target, edge in list(edges.items()):
                if edge.kind is not EdgeKind.FOLLOWING:
                    continue
                del edges[target]
                self._state.incoming[target].discard(source)
                self._state.edge_count -= 1

    def update_contact_list(self, user: Identity, contacts: Iterable[Identity]) -> None:
        """
        Replace ``user``'s follow list with ``contacts``.

        The replacement happens under one lock acquisition, so no reader ever
        observes a mix of the old and new lists. The last follow update time is
        recorded even when ``contacts`` is empty.
        """
        with self._state_lock:
            source, added = self.add_identity(user)
            if not added:
                self.remove_contact_list(user)
            for follow in contacts:
                target = self.add_identity(follow)[0]
                self._add_follow_nodes(source, target)
            self._state.follow_updates[user] = now()

    def is_following(self, user: Identity, follow: Identity) -> bool:
        """Check whether ``user`` follows ``follow``."""
        with self._state_lock:
            source = self._state.index.get(user)
            target = self._state.index.get(follow)
            if source is None or target is None:
                return False
            edge = self._state.outgoing[source].get(target)
            return edge is not None and edge.kind is EdgeKind.FOLLOWING

    def are_mutual(self, user: Identity, other: Identity) -> bool:
        """Check whether ``user`` and ``other`` follow each other."""
        with self._state_lock:
            return self.is_following(user, other) and self.is_following(other, user)

    def last_follow_update(self, user: Identity) -> Optional[Timestamp]:
        """Get the time ``user``'s follow list was last (re)established."""
        with self._state_lock:
            return self._state.follow_updates.get(user)

    def _contacts_snapshot(self, user: Identity) -> List[Identity]:
        """Identities followed by ``user`` at this instant."""
        with self._state_lock:
            source = self._state.index.get(user)
            if source is None:
                return []
            return [
                self._state.nodes[target]
                for target, edge in self._state.outgoing[source].items()
                if edge.kind is EdgeKind.FOLLOWING
            ]

    def get_contacts(self, user: Identity) -> ContactView:
        """Get a lazy view of the identities ``user`` follows."""
        return ContactView(self, user)

    def get_followers(self, user: Identity) -> Set[Identity]:
        """Get the identities following ``user``."""
        with self._state_lock:
            target = self._state.index.get(user)
            if target is None:
                return set()
            return {self._state.nodes[source] for source in self._state.incoming[target]}

    def get_mutuals(self, user: Identity) -> Set[Identity]:
        """Get the identities that ``user`` follows and that follow ``user`` back."""
        with self._state_lock:
            handle = self._state.index.get(user)
            if handle is None:
                return set()
            outgoing = {
                target
                for target, edge in self._state.outgoing[handle].items()
                if edge.kind is EdgeKind.FOLLOWING
            }
            mutual = outgoing & self._state.incoming[handle]
            return {self._state.nodes[other] for other in mutual}

    def get_degree(self, user: Identity, reverse: bool = False) -> int:
        """Get the number of follows (or followers, with ``reverse``) of ``user``."""
        with self._state_lock:
            handle = self._state.index.get(user)
            if handle is None:
                return 0
            if reverse:
                return len(self._state.incoming[handle])
            return len(self._state.outgoing[handle])

    def set_profile(self, user: Identity, profile: Profile, timestamp: Timestamp) -> None:
        """Cache ``user``'s profile together with its record timestamp."""
        with self._state_lock:
            self.add_identity(user)
            self._state.profiles[user] = ProfileRecord(profile, timestamp)

    def mark_no_profile(self, user: Identity) -> None:
        """Mark ``user`` as queried with no profile found."""
        with self._state_lock:
            self.add_identity(user)
            self._state.profiles[user] = None

    def merge_profiles(self, records: Mapping[Identity, Optional[ProfileRecord]]) -> None:
        """Merge fetched profile records, ``None`` meaning checked and missing."""
        with self._state_lock:
            for user, record in records.items():
                if record is None:
                    self.mark_no_profile(user)
                else:
                    self.set_profile(user, record.profile, record.created_at)

    def get_profile(self, user: Identity) -> Optional[ProfileRecord]:
        """Get ``user``'s cached profile, or None if unknown or missing."""
        with self._state_lock:
            return self._state.profiles.get(user)

    def profile_status(self, user: Identity) -> ProfileStatus:
        """Distinguish never-queried, queried-and-missing and present profiles."""
        with self._state_lock:
            if user not in self._state.profiles:
                return ProfileStatus.UNKNOWN
            if self._state.profiles[user] is None:
                return ProfileStatus.MISSING
            return ProfileStatus.PRESENT

    def get_nodes(self) -> Set[Identity]:
        """Get all identities in the graph."""
        with self._state_lock:
            return set(self._state.nodes)

    def node_count(self) -> int:
        """Get the number of identities in the graph."""
        with self._state_lock:
            return len(self._state.nodes)

    def edge_count(self) -> int:
        """Get the total number of edges in the graph."""
        with self._state_lock:
            return self._state.edge_count
