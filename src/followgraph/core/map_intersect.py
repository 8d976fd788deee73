"""
Key intersection over two mappings.

Sets have ``intersection``; mappings do not. These helpers yield the keys
shared by two mappings together with the value each mapping holds for them,
iterating the smaller mapping and probing the larger one so the cost is
bounded by the size of the smaller argument.
"""

from typing import Dict, Hashable, Iterator, Mapping, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


def intersect(first: Mapping[K, V], other: Mapping[K, V]) -> Iterator[Tuple[K, V, V]]:
    """
    Yield ``(key, first[key], other[key])`` for every key present in both.

    Whichever mapping is iterated internally, values are always paired as
    (value from ``first``, value from ``other``). Output order is unspecified.

    Args:
        first: First mapping
        other: Second mapping

    Yields:
        Tuple[K, V, V]: Shared key, its value in ``first``, its value in ``other``
    """
    if len(first) <= len(other):
        for key, value in first.items():
            if key in other:
                yield key, value, other[key]
    else:
        for key, value in other.items():
            if key in first:
                yield key, first[key], value


def intersect_map(first: Mapping[K, V], other: Mapping[K, V]) -> Dict[K, Tuple[V, V]]:
    """Collect ``intersect`` into a mapping of key to (first value, other value)."""
    return {key: (value1, value2) for key, value1, value2 in intersect(first, other)}
