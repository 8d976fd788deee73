"""
Utility functions shared by the search and ranking algorithms.
"""

import logging
from itertools import islice
from typing import Dict, Iterable, Iterator, List, Optional, TypeVar

from ..infrastructure.datasource import FollowDataSource
from .graph import SocialGraph
from .identity import Identity
from .models import ContactListRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunked(items: Iterable[T], size: int) -> Iterator[List[T]]:
    """Split ``items`` into consecutive lists of at most ``size`` elements."""
    if size < 1:
        raise ValueError("chunk size must be positive")
    iterator = iter(items)
    while chunk := list(islice(iterator, size)):
        yield chunk


def batch_count(total: int, size: int) -> int:
    """Number of batches needed for ``total`` items."""
    return -(-total // size)


async def fetch_contact_lists_batched(
    graph: SocialGraph,
    source: FollowDataSource,
    identities: Iterable[Identity],
    batch_size: int,
    timeout: Optional[float] = None,
    operation: str = "fetch",
) -> Dict[Identity, ContactListRecord]:
    """
    Fetch contact lists batch by batch and merge each batch into the graph.

    Each batch is awaited before its results are merged, and the graph lock is
    only taken for the merge. Identities without a record are logged and left
    untouched in the graph. DataSourceError propagates to the caller.

    Returns:
        Dict[Identity, ContactListRecord]: Every record that was found
    """
    pending = list(dict.fromkeys(identities))
    total = batch_count(len(pending), batch_size)
    found: Dict[Identity, ContactListRecord] = {}

    for current, batch in enumerate(chunked(pending, batch_size), start=1):
        logger.debug("%s: batch %d/%d (%d identities)", operation, current, total, len(batch))
        records = await source.fetch_contact_lists(batch, timeout)
        with graph.locked():
            for identity in batch:
                record = records.get(identity)
                if record is None:
                    logger.debug("%s: no contact list for %s", operation, identity)
                    continue
                graph.update_contact_list(identity, record.contacts)
                found[identity] = record

    return found
