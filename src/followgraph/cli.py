"""Command Line Interface for the follow graph tools.

This module runs the degree-of-separation search and the friends-of-friends
ranking against a local dump of Nostr events.

The CLI supports the following commands:
    - sep-degree: Find the degree of separation between two identities
    - rank: Rank recommendation candidates around one identity

Identities are accepted as hex keys, ``npub1...`` strings or ``nostr:`` URIs.

Example Usage:
    python -m followgraph sep-degree npub1... npub1... --events dump.jsonl
    python -m followgraph rank npub1... --events dump.json --top 20
"""

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from .config import DEFAULT_MAX_ROUNDS, DEFAULT_SEARCH_BATCH_SIZE, NeighborhoodConfig, SearchConfig
from .core.exceptions import FollowGraphError, ParseError
from .core.graph import SocialGraph
from .core.identity import Identity
from .core.models import RankedIdentity, SeparationResult
from .core.neighborhood import NeighborhoodBuilder
from .core.separation import find_separation
from .infrastructure.event_source import EventFileSource

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(verbosity: int = 0) -> None:
    """Configure package logging.

    Args:
        verbosity (int): 0 for warnings only, 1 for info, 2 or more for debug
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger = logging.getLogger("followgraph")
    package_logger.handlers = [handler]
    package_logger.setLevel(level)


def parse_identity(text: str) -> Identity:
    """Argument type converting text to an Identity."""
    try:
        return Identity.parse(text)
    except ParseError as e:
        raise argparse.ArgumentTypeError(str(e))


def positive_int(text: str) -> int:
    """Argument type accepting integers greater than zero."""
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}")
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def display_label(graph: SocialGraph, identity: Identity) -> str:
    """Best human readable name known for ``identity``."""
    record = graph.get_profile(identity)
    if record is None or record.profile.label is None:
        return "None"
    return record.profile.label


def format_separation(result: SeparationResult) -> List[str]:
    """Render a separation result as output lines."""
    return [f"degrees: {result.degree}", *result.bech32_path]


def format_ranking(
    graph: SocialGraph, ranked: Sequence[RankedIdentity], top: Optional[int] = None
) -> List[str]:
    """Render ranked identities best first, each followed by its reasons."""
    best_first = list(reversed(ranked))
    if top is not None:
        best_first = best_first[:top]

    lines = []
    for entry in best_first:
        lines.append(f"{display_label(graph, entry.identity)} | {entry.identity} | rank: {entry.rank}")
        for reason in entry.reasons:
            lines.append(f"    - {display_label(graph, reason)} ({reason})")
    return lines


async def run_sep_degree(args: argparse.Namespace) -> List[str]:
    """Execute the sep-degree command."""
    config = SearchConfig(batch_size=args.batch_size, max_rounds=args.max_rounds)
    source = EventFileSource(args.events)
    graph = SocialGraph()
    result = await find_separation(graph, source, args.first, args.second, config)
    return format_separation(result)


async def run_rank(args: argparse.Namespace) -> List[str]:
    """Execute the rank command."""
    source = EventFileSource(args.events)
    graph = SocialGraph()
    builder = await NeighborhoodBuilder.for_root(graph, source, args.root, NeighborhoodConfig())

    for depth in range(1, args.levels + 1):
        await builder.add_level()
        if depth <= 2:
            await builder.add_metadata(depth)

    return format_ranking(graph, builder.generate_ranks(), args.top)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the command-line argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="followgraph", description="Nostr follow graph tools")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase log verbosity"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    sep = subparsers.add_parser(
        "sep-degree", help="Find the degree of separation between two identities"
    )
    sep.add_argument("first", type=parse_identity, help="First identity")
    sep.add_argument("second", type=parse_identity, help="Second identity")
    sep.add_argument("--events", required=True, help="JSON or JSON-lines event dump")
    sep.add_argument("--max-rounds", type=positive_int, default=DEFAULT_MAX_ROUNDS)
    sep.add_argument("--batch-size", type=positive_int, default=DEFAULT_SEARCH_BATCH_SIZE)

    rank = subparsers.add_parser("rank", help="Rank friends-of-friends of an identity")
    rank.add_argument("root", type=parse_identity, help="Identity to rank around")
    rank.add_argument("--events", required=True, help="JSON or JSON-lines event dump")
    rank.add_argument(
        "--levels", type=positive_int, default=3, help="Number of levels to build (at least 3)"
    )
    rank.add_argument("--top", type=positive_int, default=None, help="Only print the best N")

    return parser


async def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the CLI application.

    Returns:
        int: Process exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1
    if args.command == "rank" and args.levels < 3:
        parser.error("--levels must be at least 3 to rank")

    configure_logging(args.verbose)

    try:
        if args.command == "sep-degree":
            lines = await run_sep_degree(args)
        else:
            lines = await run_rank(args)
    except FollowGraphError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

    for line in lines:
        print(line)
    return 0
