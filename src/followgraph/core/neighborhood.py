"""
Ego-centric neighborhood levels and friends-of-friends ranking.

Level 0 holds the root identity. Each ``add_level`` call fetches the contact
lists of the most recent level and pushes the followees not seen in any earlier
level, so every identity keeps the distance at which it was first reached.
Ranking looks at level 2 and scores each identity by how many of the root's
level-1 follows it mutually follows.
"""

import logging
from typing import Dict, List, Optional, Set

from ..config import NeighborhoodConfig
from ..infrastructure.datasource import FollowDataSource
from .exceptions import LevelNotPresentError, NotEnoughLevelsError
from .graph import SocialGraph
from .identity import Identity
from .models import RankedIdentity
from .utils import batch_count, chunked, fetch_contact_lists_batched

logger = logging.getLogger(__name__)

MUTUAL_CONNECTION_WEIGHT = 10


class NeighborhoodBuilder:
    """
    Builds distance levels around a root identity.

    Attributes:
        graph (SocialGraph): Shared graph the fetched follows are merged into
        source (FollowDataSource): Collaborator answering fetches
        root (Identity): Identity at level 0
        config (NeighborhoodConfig): Batch size and timeout
        levels (List[Set[Identity]]): Identities first reached at each distance
        distances (Dict[Identity, int]): Level index of every reached identity
    """

    def __init__(
        self,
        graph: SocialGraph,
        source: FollowDataSource,
        root: Identity,
        config: Optional[NeighborhoodConfig] = None,
    ):
        self.graph = graph
        self.source = source
        self.root = root
        self.config = config or NeighborhoodConfig()
        self.levels: List[Set[Identity]] = [{root}]
        self.distances: Dict[Identity, int] = {root: 0}
        graph.add_identity(root)

    @classmethod
    async def for_root(
        cls,
        graph: SocialGraph,
        source: FollowDataSource,
        root: Identity,
        config: Optional[NeighborhoodConfig] = None,
    ) -> "NeighborhoodBuilder":
        """
        Create a builder and load the root's profile into the graph.

        Raises:
            DataSourceError: If the profile fetch fails
        """
        builder = cls(graph, source, root, config)
        records = await source.fetch_profiles([root], builder.config.fetch_timeout)
        graph.merge_profiles({root: records.get(root)})
        return builder

    def level(self, index: int) -> Set[Identity]:
        """
        Get the identities at one level.

        Raises:
            LevelNotPresentError: If the level has not been built
        """
        if not 0 <= index < len(self.levels):
            raise LevelNotPresentError(index)
        return self.levels[index]

    def distance(self, identity: Identity) -> Optional[int]:
        """Get the level ``identity`` was first reached at, if it was reached."""
        return self.distances.get(identity)

    async def add_level(self) -> "NeighborhoodBuilder":
        """
        Fetch the follows of the most recent level and push the next level.

        Returns:
            NeighborhoodBuilder: This builder, for chaining

        Raises:
            DataSourceError: If a fetch fails
        """
        top_level = self.levels[-1]
        depth = len(self.levels)
        logger.info("Building level %d from %d identities", depth, len(top_level))

        records = await fetch_contact_lists_batched(
            self.graph,
            self.source,
            top_level,
            self.config.level_batch_size,
            self.config.fetch_timeout,
            operation=f"level {depth}",
        )

        next_level: Set[Identity] = set()
        for record in records.values():
            for follow in record.contacts:
                if follow in self.distances:
                    continue
                next_level.add(follow)
                self.distances[follow] = depth

        self.levels.append(next_level)
        logger.info("Level %d finished with %d identities", depth, len(next_level))
        return self

    async def add_metadata(self, level: int) -> None:
        """
        Fetch and cache the profiles of every identity at ``level``.

        Raises:
            LevelNotPresentError: If the level has not been built
            DataSourceError: If a fetch fails
        """
        identities = list(self.level(level))
        total = batch_count(len(identities), self.config.level_batch_size)

        for current, batch in enumerate(chunked(identities, self.config.level_batch_size), start=1):
            logger.debug("metadata level %d: batch %d/%d", level, current, total)
            records = await self.source.fetch_profiles(batch, self.config.fetch_timeout)
            self.graph.merge_profiles({identity: records.get(identity) for identity in batch})

        logger.info("Loaded metadata for %d identities at level %d", len(identities), level)

    def generate_ranks(self) -> List[RankedIdentity]:
        """
        Rank level-2 identities by mutual connections with level 1.

        Every mutual follow shared with a level-1 identity adds
        ``MUTUAL_CONNECTION_WEIGHT`` to the rank and is kept as a reason.

        Returns:
            List[RankedIdentity]: Ranked identities, lowest rank first

        Raises:
            NotEnoughLevelsError: If levels 0, 1 and 2 are not all built
        """
        if len(self.levels) <= 2:
            raise NotEnoughLevelsError()

        level_1 = self.levels[1]
        ranked = []
        with self.graph.locked():
            for user in self.levels[2]:
                reasons = sorted(self.graph.get_mutuals(user) & level_1, key=Identity.to_hex)
                ranked.append(
                    RankedIdentity(user, MUTUAL_CONNECTION_WEIGHT * len(reasons), tuple(reasons))
                )

        ranked.sort(key=lambda entry: (entry.rank, entry.identity.to_hex()))
        return ranked
