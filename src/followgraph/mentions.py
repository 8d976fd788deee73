"""
Identity mentions in free text.

Requests arrive as ordinary notes that reference identities with
``nostr:npub1...`` URIs. A note addressed to a responder mentions the responder
first, so three-mention requests skip the first reference.
"""

import logging
import re
from typing import List, Optional

from .config import SearchConfig
from .core.exceptions import ParseError, TooFewArgumentsError, TooManyArgumentsError
from .core.graph import SocialGraph
from .core.identity import Identity
from .core.models import SeparationResult
from .core.separation import find_separation
from .infrastructure.datasource import FollowDataSource

logger = logging.getLogger(__name__)

MENTION_PATTERN = re.compile(r"nostr:npub[a-zA-Z0-9]*")


def find_identities_in_message(text: str) -> List[Identity]:
    """Every parseable ``nostr:npub`` reference in ``text``, in order of appearance."""
    found = []
    for match in MENTION_PATTERN.finditer(text):
        try:
            found.append(Identity.parse(match.group()))
        except ParseError as e:
            logger.debug("Ignoring mention %s: %s", match.group(), e)
    return found


def extract_identities(text: str, count: int) -> List[Identity]:
    """
    Extract exactly ``count`` identity references from ``text``.

    Raises:
        TooFewArgumentsError: If fewer references are present
        TooManyArgumentsError: If more references are present
    """
    identities = find_identities_in_message(text)
    if len(identities) > count:
        raise TooManyArgumentsError()
    if len(identities) < count:
        raise TooFewArgumentsError()
    return identities


async def separation_from_message(
    graph: SocialGraph,
    source: FollowDataSource,
    text: str,
    argnum: int,
    config: Optional[SearchConfig] = None,
) -> SeparationResult:
    """
    Answer a degree-of-separation request written as free text.

    Args:
        graph: Shared graph
        source: Data source for contact lists
        text: Request text
        argnum: Expected number of mentions; with 2 both are the targets,
            otherwise the first mention is skipped and the next two are used

    Returns:
        SeparationResult: Verified degree and path

    Raises:
        TooFewArgumentsError: If the text has fewer than ``argnum`` mentions
        TooManyArgumentsError: If the text has more than ``argnum`` mentions
        SeparationError: If the search itself fails
    """
    identities = extract_identities(text, argnum)
    first, second = (0, 1) if argnum == 2 else (1, 2)
    if second >= len(identities):
        raise TooFewArgumentsError()
    return await find_separation(graph, source, identities[first], identities[second], config)
