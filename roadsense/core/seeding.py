"""Seeded pseudo-random streams.

Every generated item draws from its own ``random.Random`` keyed by the
global seed mixed with the item's index, so any single item can be
regenerated without replaying the items before it and without sharing
generator state between callers.
"""

from __future__ import annotations

import hashlib
import random
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

MASK_32 = 0xFFFFFFFF


def normalize_seed(seed: int) -> int:
    """Fold an arbitrary integer seed into the unsigned 32-bit range."""
    return seed & MASK_32


def derive_seed(seed: int, index: int, salt: int = 0) -> int:
    """Mix the global seed with an item index (and optional family salt)."""
    return (index ^ seed ^ salt) & MASK_32


def stream(seed: int, index: int = 0, salt: int = 0) -> random.Random:
    """Return an independent generator for item ``index`` under ``seed``."""
    return random.Random(derive_seed(seed, index, salt))


def stable_hash(value: str) -> int:
    """Process-independent hash of a string (``hash()`` is salted per run)."""
    return int(hashlib.sha256(value.encode("utf-8")).hexdigest()[:8], 16)


def weighted_choice(rng: random.Random, pairs: Sequence[tuple[T, float]]) -> T:
    """Pick an item by walking cumulative weights against one uniform draw.

    Args:
        rng: Stream to draw from (exactly one draw is consumed).
        pairs: ``(item, weight)`` pairs; weights need not be normalised.

    Returns:
        The selected item. Falls back to the first item if rounding leaves
        the draw past the last cumulative bound.
    """
    if not pairs:
        raise ValueError("weighted_choice needs at least one (item, weight) pair")

    total = sum(weight for _, weight in pairs)
    remaining = rng.random() * total
    for item, weight in pairs:
        if remaining <= weight:
            return item
        remaining -= weight
    return pairs[0][0]
