"""Shared test fixtures."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Union

import pytest

from followgraph.core.graph import SocialGraph
from followgraph.core.identity import Identity
from followgraph.infrastructure.datasource import InMemoryDataSource


def make_identity(n: int) -> Identity:
    """Deterministic identity whose key is ``n`` repeated 32 times."""
    return Identity(bytes([n]) * 32)


class EventFactory:
    """Builds raw Nostr events and writes them to event dump files."""

    def __init__(self, directory: Path):
        self.directory = directory

    def contacts(
        self, author: Identity, follows: Iterable[Identity], created_at: int = 1
    ) -> Dict[str, Any]:
        return {
            "id": "0" * 64,
            "pubkey": author.to_hex(),
            "created_at": created_at,
            "kind": 3,
            "tags": [["p", follow.to_hex()] for follow in follows],
            "content": "",
            "sig": "0" * 128,
        }

    def metadata(
        self, author: Identity, content: Union[str, Dict[str, Any]], created_at: int = 1
    ) -> Dict[str, Any]:
        if not isinstance(content, str):
            content = json.dumps(content)
        return {
            "pubkey": author.to_hex(),
            "created_at": created_at,
            "kind": 0,
            "tags": [],
            "content": content,
        }

    def network(self, follows: Mapping[Identity, Iterable[Identity]]) -> List[Dict[str, Any]]:
        return [self.contacts(author, targets) for author, targets in follows.items()]

    def write(
        self, events: List[Any], name: str = "events.jsonl", as_array: bool = False
    ) -> Path:
        path = self.directory / name
        if as_array:
            path.write_text(json.dumps(events), encoding="utf-8")
        else:
            lines = [line if isinstance(line, str) else json.dumps(line) for line in events]
            path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path


@pytest.fixture
def ident():
    """Fixture providing a factory for deterministic identities."""
    return make_identity


@pytest.fixture
def graph() -> SocialGraph:
    """Fixture providing an empty social graph."""
    return SocialGraph()


@pytest.fixture
def source() -> InMemoryDataSource:
    """Fixture providing an empty in-memory data source."""
    return InMemoryDataSource()


@pytest.fixture
def publish(source):
    """Fixture publishing a whole follow network into the in-memory source."""

    def _publish(follows: Mapping[Identity, Iterable[Identity]], created_at: int = 1) -> None:
        for author, targets in follows.items():
            source.publish_contact_list(author, targets, created_at)

    return _publish


@pytest.fixture
def events(tmp_path) -> EventFactory:
    """Fixture providing an event factory writing into a temporary directory."""
    return EventFactory(tmp_path)
