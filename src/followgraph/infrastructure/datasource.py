"""
Data source protocol and in-memory implementation.

The search and ranking algorithms never talk to the network themselves. They
consume a data source that answers two batched questions: the newest contact
list of each requested identity, and the newest profile of each requested
identity. Transport failures and timeouts surface as DataSourceError.

Contract:
    - ``fetch_contact_lists`` omits identities without any contact list record.
    - ``fetch_profiles`` returns every requested identity, mapping those without
      a profile to ``None``.
    - When several records exist for one identity, the newest one wins.
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from ..core.exceptions import DataSourceError
from ..core.identity import Identity
from ..core.models import ContactListRecord, Profile, ProfileRecord, Timestamp

logger = logging.getLogger(__name__)


class FollowDataSource(Protocol):
    """Protocol for collaborators that fetch follow lists and profiles."""

    async def fetch_contact_lists(
        self, identities: Sequence[Identity], timeout: Optional[float] = None
    ) -> Dict[Identity, ContactListRecord]:
        """Fetch the newest contact list of each identity that has one."""

    async def fetch_profiles(
        self, identities: Sequence[Identity], timeout: Optional[float] = None
    ) -> Dict[Identity, Optional[ProfileRecord]]:
        """Fetch the newest profile of each identity, None where there is none."""


def dedupe(identities: Iterable[Identity]) -> Tuple[Identity, ...]:
    """Drop repeated identities, keeping first-seen order."""
    return tuple(dict.fromkeys(identities))


class InMemoryDataSource:
    """
    Data source answering from records held in memory.

    Useful for embedding a pre-fetched snapshot and for exercising the
    algorithms without a network. Every fetch is appended to ``requests`` as
    ``(operation, identities)``. Setting ``failure`` makes subsequent fetches
    raise it wrapped in DataSourceError.

    Attributes:
        requests (List[Tuple[str, Tuple[Identity, ...]]]): Log of fetches
        failure (Optional[Exception]): Error to raise from fetches
    """

    def __init__(self):
        self._contact_lists: Dict[Identity, ContactListRecord] = {}
        self._profiles: Dict[Identity, ProfileRecord] = {}
        self.requests: List[Tuple[str, Tuple[Identity, ...]]] = []
        self.failure: Optional[Exception] = None

    def publish_contact_list(
        self, author: Identity, contacts: Iterable[Identity], created_at: Timestamp = 0
    ) -> None:
        """Store a contact list unless a newer one is already held."""
        current = self._contact_lists.get(author)
        if current is not None and current.created_at > created_at:
            return
        self._contact_lists[author] = ContactListRecord(dedupe(contacts), created_at)

    def publish_profile(self, author: Identity, profile: Profile, created_at: Timestamp = 0) -> None:
        """Store a profile unless a newer one is already held."""
        current = self._profiles.get(author)
        if current is not None and current.created_at > created_at:
            return
        self._profiles[author] = ProfileRecord(profile, created_at)

    def retract_contact_list(self, author: Identity) -> None:
        """Forget ``author``'s contact list."""
        self._contact_lists.pop(author, None)

    def _check_failure(self) -> None:
        if self.failure is not None:
            raise DataSourceError(f"Fetch failed: {self.failure}") from self.failure

    async def fetch_contact_lists(
        self, identities: Sequence[Identity], timeout: Optional[float] = None
    ) -> Dict[Identity, ContactListRecord]:
        requested = dedupe(identities)
        self.requests.append(("contact_lists", requested))
        self._check_failure()
        await asyncio.sleep(0)
        return {
            identity: self._contact_lists[identity]
            for identity in requested
            if identity in self._contact_lists
        }

    async def fetch_profiles(
        self, identities: Sequence[Identity], timeout: Optional[float] = None
    ) -> Dict[Identity, Optional[ProfileRecord]]:
        requested = dedupe(identities)
        self.requests.append(("profiles", requested))
        self._check_failure()
        await asyncio.sleep(0)
        found: Dict[Identity, Optional[ProfileRecord]] = {}
        for identity in requested:
            found[identity] = self._profiles.get(identity)
            if found[identity] is None:
                logger.debug("No profile for %s", identity)
        return found
