# contextualizer/core/translation/selector.py
"""
Deterministic, seeded selection.

The same (story, marker, country) must pick the same name or place forever:
share images are regenerated in batch jobs and have to stay pixel-stable, and
other renderers (in other languages) must agree with this one. The hash is
therefore fixed and versioned rather than borrowed from the runtime:

    seed   = "<story_id>-<marker_key>-<country>[-<extra>...]"
    hash   = FNV-1a, 32-bit, over the UTF-8 bytes of the seed
    rand   = (hash mod 1_000_000) / 1_000_000        in [0, 1)
    index  = floor(rand * len(items))

Changing any of these constants changes every published story; bump
SELECTOR_VERSION if that is ever intended.
"""

from __future__ import annotations

import math
from typing import Sequence, TypeVar

from contextualizer.core.domain.exceptions import EmptyCandidatePoolError

T = TypeVar("T")

SELECTOR_VERSION = "fnv1a32-m1e6/v1"

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
RANDOM_RESOLUTION = 1_000_000


def make_seed(story_id: str, marker_key: str, country: str, *extra: str) -> str:
    return "-".join((story_id, marker_key, country) + tuple(extra))


def fnv1a_32(text: str) -> int:
    value = FNV_OFFSET_BASIS
    for byte in text.encode("utf-8"):
        value ^= byte
        value = (value * FNV_PRIME) & 0xFFFFFFFF
    return value


def seeded_random(seed: str) -> float:
    """Reproducible pseudo-random number in [0, 1) derived from the seed."""
    return (fnv1a_32(seed) % RANDOM_RESOLUTION) / RANDOM_RESOLUTION


def select(seed: str, items: Sequence[T]) -> T:
    """
    Pick one element of `items` for `seed`.

    Raises EmptyCandidatePoolError for an empty sequence; callers are
    expected to walk their fallback chain before getting here.
    """
    if not items:
        raise EmptyCandidatePoolError(seed)
    index = math.floor(seeded_random(seed) * len(items))
    return items[index]
