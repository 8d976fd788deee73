"""
Data source backed by a dump of Nostr events.

The dump is either a JSON array of events or JSON lines with one event per
line, as produced by common relay export tools. It is read once, lazily, on the
first fetch. Every event is validated against ``EVENT_SCHEMA``; events that
fail validation, carry an unparseable author, or hold unparseable profile JSON
are logged and skipped so one bad record never hides the rest of the dump.

Only two kinds matter here:
- kind 3 (contact list): ``["p", <hex key>, ...]`` tags name the followees
- kind 0 (metadata): the content is a JSON profile object

For each author the event with the newest ``created_at`` wins.
"""

import asyncio
import json
import logging
import os
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple, Union

import aiofiles
from jsonschema import ValidationError as JsonSchemaError
from jsonschema import validate

from ..core.exceptions import DataSourceError, ParseError
from ..core.identity import Identity
from ..core.models import ContactListRecord, Profile, ProfileRecord
from .datasource import dedupe

logger = logging.getLogger(__name__)

KIND_METADATA = 0
KIND_CONTACT_LIST = 3

EVENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "pubkey": {"type": "string", "pattern": "^[0-9a-fA-F]{64}$"},
        "created_at": {"type": "integer", "minimum": 0},
        "kind": {"type": "integer", "minimum": 0},
        "tags": {
            "type": "array",
            "items": {"type": "array", "items": {"type": "string"}},
        },
        "content": {"type": "string"},
        "sig": {"type": "string"},
    },
    "required": ["pubkey", "created_at", "kind", "tags", "content"],
}


def parse_contact_tags(tags: Sequence[Sequence[str]]) -> Tuple[Identity, ...]:
    """
    Extract followed identities from the tags of a contact list event.

    Tags other than ``p`` are ignored and keys that fail to parse are logged
    and skipped. Repeated keys are kept once, in first-seen order.

    Args:
        tags: Event tags

    Returns:
        Tuple[Identity, ...]: Followed identities
    """
    contacts = []
    for tag in tags:
        if len(tag) < 2 or tag[0] != "p":
            continue
        try:
            contacts.append(Identity.from_hex(tag[1]))
        except ParseError as e:
            logger.warning("Skipping contact %r: %s", tag[1], e)
    return dedupe(contacts)


class EventFileSource:
    """
    Data source answering from a JSON or JSON-lines event dump.

    Attributes:
        path (str): Location of the dump
        skipped (int): Number of events rejected while loading
    """

    def __init__(self, path: Union[str, os.PathLike]):
        """
        Initialize the source.

        Args:
            path: Location of the dump; nothing is read until the first fetch
        """
        self.path = os.fspath(path)
        self.skipped = 0
        self._contact_lists: Dict[Identity, ContactListRecord] = {}
        self._profiles: Dict[Identity, ProfileRecord] = {}
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def contact_list_count(self) -> int:
        return len(self._contact_lists)

    @property
    def profile_count(self) -> int:
        return len(self._profiles)

    async def _read(self) -> str:
        async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
            return await f.read()

    async def load(self, timeout: Optional[float] = None) -> None:
        """
        Read and index the dump once.

        ``timeout`` bounds reading the file only. Parsing and indexing run
        synchronously once the content is in memory and are not interrupted.
        A load that fails or times out leaves the source unloaded, so the next
        fetch tries again.

        Args:
            timeout: Seconds allowed for reading the file, None for no limit

        Raises:
            DataSourceError: If the file cannot be read, is not UTF-8, is not
                valid JSON, or reading it times out
        """
        async with self._lock:
            if self._loaded:
                return
            try:
                if timeout is None:
                    content = await self._read()
                else:
                    content = await asyncio.wait_for(self._read(), timeout)
            except TimeoutError as e:
                logger.error("Reading event dump %s timed out after %ss", self.path, timeout)
                raise DataSourceError(f"Loading {self.path} timed out after {timeout}s") from e
            except (OSError, UnicodeDecodeError) as e:
                logger.error("Failed to read event dump %s: %s", self.path, e)
                raise DataSourceError(f"Event dump loading failed: {e}") from e

            for event in self._decode(content):
                self._ingest(event)

            self._loaded = True
            logger.info(
                "Loaded %d contact lists and %d profiles from %s (%d events skipped)",
                len(self._contact_lists),
                len(self._profiles),
                self.path,
                self.skipped,
            )

    def _decode(self, content: str) -> Iterator[Any]:
        """Yield raw events from either supported layout."""
        stripped = content.strip()
        if not stripped:
            return
        if stripped.startswith("["):
            try:
                events = json.loads(stripped)
            except json.JSONDecodeError as e:
                raise DataSourceError(f"Invalid event dump {self.path}: {e.msg}") from e
            yield from events
            return

        for number, line in enumerate(stripped.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning("Skipping line %d of %s: %s", number, self.path, e.msg)
                self.skipped += 1

    def _ingest(self, event: Any) -> None:
        """Index one event, keeping the newest record per author."""
        try:
            validate(instance=event, schema=EVENT_SCHEMA)
            author = Identity.from_hex(event["pubkey"])
        except (JsonSchemaError, ParseError) as e:
            logger.warning("Skipping invalid event: %s", getattr(e, "message", e))
            self.skipped += 1
            return

        created_at = int(event["created_at"])
        kind = event["kind"]

        if kind == KIND_CONTACT_LIST:
            current = self._contact_lists.get(author)
            if current is None or current.created_at <= created_at:
                self._contact_lists[author] = ContactListRecord(
                    parse_contact_tags(event["tags"]), created_at
                )
        elif kind == KIND_METADATA:
            current = self._profiles.get(author)
            if current is not None and current.created_at > created_at:
                return
            try:
                profile = Profile.from_json(event["content"])
            except ValueError as e:
                logger.warning("Skipping metadata of %s: %s", author, e)
                self.skipped += 1
                return
            self._profiles[author] = ProfileRecord(profile, created_at)

    async def fetch_contact_lists(
        self, identities: Sequence[Identity], timeout: Optional[float] = None
    ) -> Dict[Identity, ContactListRecord]:
        """Fetch the newest contact list of each identity that has one."""
        await self.load(timeout)
        return {
            identity: self._contact_lists[identity]
            for identity in dedupe(identities)
            if identity in self._contact_lists
        }

    async def fetch_profiles(
        self, identities: Sequence[Identity], timeout: Optional[float] = None
    ) -> Dict[Identity, Optional[ProfileRecord]]:
        """Fetch the newest profile of each identity, None where there is none."""
        await self.load(timeout)
        return {identity: self._profiles.get(identity) for identity in dedupe(identities)}
