"""
Degrees of separation through mutual follows.

The search grows two frontiers, one from each target, alternating strictly
between them one level per round. A border identity joins its side's next
level only when it mutually follows someone in that side's most recent level,
which keeps one-directional fan-out (accounts followed by everyone) from
dominating the search. Before every expansion the most recent levels of both
sides are intersected; a shared identity is the meeting point and the path is
rebuilt by following backpointers towards each root.

Graph data is fetched incrementally and can change while a search runs, so a
found path is provisional until ``verify_path`` has refetched every hop.
``find_separation`` combines both and re-runs the search a bounded number of
times when verification fails.

Example:
    >>> graph = SocialGraph()
    >>> result = await find_separation(graph, source, alice, bob)
    >>> result.degree, result.bech32_path
    (2, ['npub1...', 'npub1...', 'npub1...'])
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..config import SearchConfig
from ..infrastructure.datasource import FollowDataSource
from .exceptions import (
    MissingContactListError,
    PathVerificationError,
    SeparationError,
    SeparationNotFoundError,
)
from .graph import SocialGraph, now
from .identity import Identity
from .map_intersect import intersect
from .models import SeparationResult
from .utils import fetch_contact_lists_batched

logger = logging.getLogger(__name__)


@dataclass
class SearchSide:
    """
    Level maps and border of one side of the search.

    Attributes:
        root (Identity): Target this side starts from
        levels (List[Dict[Identity, Identity]]): Per depth, identity -> backpointer
        border (List[Identity]): Identities to examine in the next expansion
        visited (Set[Identity]): Every identity present in ``levels``
    """

    root: Identity
    levels: List[Dict[Identity, Identity]]
    border: List[Identity]
    visited: Set[Identity] = field(default_factory=set)

    @classmethod
    def start(cls, root: Identity, contacts: Sequence[Identity]) -> "SearchSide":
        """Create a side whose level 0 is ``root`` and whose border is its follows."""
        return cls(
            root=root,
            levels=[{root: root}],
            border=[c for c in dict.fromkeys(contacts) if c != root],
            visited={root},
        )

    @property
    def depth(self) -> int:
        """Depth of the most recent level."""
        return len(self.levels) - 1


class SeparationSearch:
    """
    Bidirectional, round-synchronized mutual-follow search.

    The instance keeps no per-run state, so ``run`` may be awaited repeatedly
    and concurrently with other searches sharing the same graph.
    """

    def __init__(
        self,
        graph: SocialGraph,
        source: FollowDataSource,
        config: Optional[SearchConfig] = None,
    ):
        """Initialize the search over a shared graph and data source."""
        self.graph = graph
        self.source = source
        self.config = config or SearchConfig()

    async def run(self, target_1: Identity, target_2: Identity) -> SeparationResult:
        """
        Find the degree of separation between two identities.

        Args:
            target_1 (Identity): First endpoint, start of the returned path
            target_2 (Identity): Second endpoint, end of the returned path

        Returns:
            SeparationResult: Degree and the path from ``target_1`` to ``target_2``

        Raises:
            MissingContactListError: If either target has no contact list
            SeparationNotFoundError: If no path is found within the round cap
            SeparationError: If the level maps meet in an inconsistent state
            DataSourceError: If a fetch fails
        """
        logger.info("Searching separation between %s and %s", target_1, target_2)
        with self.graph.locked():
            self.graph.add_identity(target_1)
            self.graph.add_identity(target_2)

        side_1, side_2 = await self._initialize_sides(target_1, target_2)

        rounds = 0
        side = side_1
        while True:
            meeting = next(intersect(side_1.levels[-1], side_2.levels[-1]), None)
            if meeting is not None:
                result = self._reconstruct_path(meeting, rounds, side_1, side_2)
                logger.info("Separation found: degree %d", result.degree)
                return result

            await self._expand(side, rounds)
            rounds += 1

            if not side.levels[-1]:
                raise SeparationNotFoundError(
                    f"Separation not found: no mutual follows left to explore from {side.root}"
                )
            if rounds > self.config.max_rounds:
                raise SeparationNotFoundError(
                    f"Separation not found within {self.config.max_rounds} rounds"
                )
            side = side_2 if side is side_1 else side_1

    async def _initialize_sides(
        self, target_1: Identity, target_2: Identity
    ) -> Tuple[SearchSide, SearchSide]:
        """Fetch both targets' contact lists and seed each side's border."""
        records = await fetch_contact_lists_batched(
            self.graph,
            self.source,
            [target_1, target_2],
            self.config.batch_size,
            self.config.fetch_timeout,
            operation="targets",
        )
        for target in (target_1, target_2):
            if target not in records:
                raise MissingContactListError(target)

        return (
            SearchSide.start(target_1, records[target_1].contacts),
            SearchSide.start(target_2, records[target_2].contacts),
        )

    def _is_fresh(self, identity: Identity) -> bool:
        """Whether the graph already holds a recent enough follow list."""
        updated = self.graph.last_follow_update(identity)
        if updated is None:
            return False
        if self.config.refresh_after is None:
            return True
        return now() - updated < self.config.refresh_after

    async def _expand(self, side: SearchSide, round_index: int) -> None:
        """
        Advance ``side`` by one level.

        Border identities without a fresh follow list are fetched first. Then a
        border identity joins the next level when it mutually follows someone in
        the side's most recent level; every contact not yet in any of this
        side's levels seeds the next border.
        """
        stale = [user for user in side.border if not self._is_fresh(user)]
        logger.debug(
            "Round %d from %s: border %d, fetching %d",
            round_index + 1,
            side.root,
            len(side.border),
            len(stale),
        )
        await fetch_contact_lists_batched(
            self.graph,
            self.source,
            stale,
            self.config.batch_size,
            self.config.fetch_timeout,
            operation=f"round {round_index + 1}",
        )

        last_level = side.levels[-1]
        next_level: Dict[Identity, Identity] = {}
        next_border: Dict[Identity, None] = {}

        for user in side.border:
            if user in side.visited:
                continue
            with self.graph.locked():
                for follow in self.graph.get_contacts(user):
                    if follow in last_level:
                        if user not in next_level and self.graph.are_mutual(user, follow):
                            next_level[user] = follow
                    elif follow not in side.visited:
                        next_border[follow] = None

        side.levels.append(next_level)
        side.visited.update(next_level)
        side.border = [user for user in next_border if user not in side.visited]
        logger.info(
            "Round %d from %s: level %d has %d identities, next border %d",
            round_index + 1,
            side.root,
            side.depth,
            len(next_level),
            len(side.border),
        )

    def _reconstruct_path(
        self,
        meeting: Tuple[Identity, Identity, Identity],
        rounds: int,
        side_1: SearchSide,
        side_2: SearchSide,
    ) -> SeparationResult:
        """Rebuild the path through the meeting identity."""
        user_match, back_1, back_2 = meeting
        target_1, target_2 = side_1.root, side_2.root
        logger.debug("Sides met at %s after %d rounds", user_match, rounds)

        if rounds == 0:
            if target_1 != target_2:
                raise SeparationError(
                    f"Sides met before any expansion but the targets differ: {target_1}, {target_2}"
                )
            return SeparationResult(0, [target_1])
        if rounds == 1:
            if user_match not in (target_1, target_2):
                raise SeparationError(
                    f"Sides met after one round at {user_match}, which is neither target"
                )
            return SeparationResult(1, [target_1, target_2])
        if rounds == 2:
            return SeparationResult(2, [target_1, user_match, target_2])

        backtrack_1 = self._backtrack(side_1, back_1)
        backtrack_2 = self._backtrack(side_2, back_2)
        path = [target_1, *reversed(backtrack_1), user_match, *backtrack_2, target_2]
        return SeparationResult(rounds, path)

    @staticmethod
    def _backtrack(side: SearchSide, start: Identity) -> List[Identity]:
        """Follow backpointers from ``start`` down to the side's root, root excluded."""
        chain = []
        current = start
        index = len(side.levels) - 2
        while current != side.root:
            chain.append(current)
            current = side.levels[index][current]
            index -= 1
        return chain


async def verify_path(
    graph: SocialGraph,
    source: FollowDataSource,
    path: Sequence[Identity],
    config: Optional[SearchConfig] = None,
) -> bool:
    """
    Refetch every hop of ``path`` and check each consecutive pair is mutual.

    Returns:
        bool: False when any hop no longer follows its neighbour back

    Raises:
        DataSourceError: If the fetch fails
    """
    config = config or SearchConfig()
    logger.info("Verifying path: %s", [str(identity) for identity in path])
    if len(path) < 2:
        return True

    await fetch_contact_lists_batched(
        graph, source, path, config.batch_size, config.fetch_timeout, operation="verify"
    )

    with graph.locked():
        for user, other in zip(path, path[1:]):
            if not graph.are_mutual(user, other):
                logger.warning("Path broken between %s and %s", user, other)
                return False
    return True


async def find_separation(
    graph: SocialGraph,
    source: FollowDataSource,
    target_1: Identity,
    target_2: Identity,
    config: Optional[SearchConfig] = None,
) -> SeparationResult:
    """
    Find and verify the degree of separation between two identities.

    A path that fails verification is discarded and the search re-run, up to
    ``config.verify_attempts`` times, sleeping ``config.backoff_delay(attempt)``
    between runs.

    Raises:
        PathVerificationError: If every run produced a path that failed verification
        MissingContactListError: If either target has no contact list
        SeparationNotFoundError: If no path is found within the round cap
        DataSourceError: If a fetch fails
    """
    config = config or SearchConfig()
    search = SeparationSearch(graph, source, config)

    for attempt in range(config.verify_attempts + 1):
        result = await search.run(target_1, target_2)
        if await verify_path(graph, source, result.path, config):
            return result
        if attempt < config.verify_attempts:
            delay = config.backoff_delay(attempt)
            logger.warning(
                "Path failed verification (attempt %d/%d), retrying in %.1fs",
                attempt + 1,
                config.verify_attempts + 1,
                delay,
            )
            await asyncio.sleep(delay)

    raise PathVerificationError(
        f"Path between {target_1} and {target_2} failed verification "
        f"{config.verify_attempts + 1} times"
    )
