"""Shared fixtures for the core algorithm tests."""

from typing import Dict, List

import pytest

from followgraph.core.identity import Identity


@pytest.fixture
def chain(ident, publish) -> List[Identity]:
    """
    Fixture publishing a five-identity chain A-B-C-D-E.

    Consecutive identities follow each other; nobody else is mutual.
    """
    a, b, c, d, e = (ident(n) for n in range(1, 6))
    publish(
        {
            a: [b],
            b: [a, c],
            c: [b, d],
            d: [c, e],
            e: [d],
        }
    )
    return [a, b, c, d, e]


@pytest.fixture
def ranking_network(ident, publish) -> Dict[str, Identity]:
    """
    Fixture publishing a small neighborhood around a root.

    root follows f1 and f2; both are mutual with g. f1 also follows h, who
    follows nobody back.
    """
    root, f1, f2, g, h = (ident(n) for n in (1, 2, 3, 4, 5))
    publish(
        {
            root: [f1, f2],
            f1: [root, g, h],
            f2: [root, g],
            g: [f1, f2],
            h: [],
        }
    )
    return {"root": root, "f1": f1, "f2": f2, "g": g, "h": h}
