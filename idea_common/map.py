from __future__ import annotations

from typing import Hashable, Mapping, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


def find_first_key(mapping: Mapping[K, V], value: V) -> K | None:
    """Return the first key (in iteration order) whose value equals `value`, or None."""
    # Beware, this is O(N).
    for key, item in mapping.items():
        if item == value:
            return key
    return None


def find_all_keys(mapping: Mapping[K, V], value: V) -> list[K]:
    # Beware, this is O(N).
    return [key for key, item in mapping.items() if item == value]
