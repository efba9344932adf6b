"""
Deck shuffling with a 64-bit linear congruential generator.

The generator advances as ``state = state * 6364136223846793005 + 1 (mod 2^64)``
and drives a descending Fisher-Yates pass: for i = n-1 .. 1 the card at i is
swapped with the card at ``state % (i + 1)``. The same seed always yields
the same deck.

This is reproducible, not unpredictable. With ShuffleSource.LEDGER_TIME the
seed is the ledger timestamp, so anyone who knows when the roster filled can
recompute every hand. ShuffleSource.SECURE keeps the algorithm but draws the
seed from the secrets module.
"""

import secrets
from typing import TypeVar

from uno.logic.enums import PLAYABLE_COLORS, CardColor, ShuffleSource

LCG_MULTIPLIER = 6364136223846793005
LCG_INCREMENT = 1
_UINT64_MASK = (1 << 64) - 1

T = TypeVar("T")


class Lcg64:
    """64-bit LCG with the Knuth MMIX multiplier."""

    def __init__(self, seed: int) -> None:
        self._state = seed & _UINT64_MASK

    def next_uint64(self) -> int:
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) & _UINT64_MASK
        return self._state


def fisher_yates_shuffle(items: list[T], rng: Lcg64) -> list[T]:
    """Return a shuffled copy of items; the input list is untouched."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.next_uint64() % (i + 1)
        result[i], result[j] = result[j], result[i]
    return result


def make_seed(source: ShuffleSource, now: int) -> int:
    """Seed material for a new deck."""
    if source is ShuffleSource.LEDGER_TIME:
        return now & _UINT64_MASK
    return secrets.randbits(64)


def pick_initial_color(source: ShuffleSource, rng: Lcg64, remaining_deck: int) -> CardColor:
    """Color assigned to a black card turned up as the first discard.

    LEDGER_TIME keeps the historical rule (remaining deck size mod 4), which
    is fixed for a given roster size. SECURE continues the shuffle stream.
    """
    if source is ShuffleSource.LEDGER_TIME:
        return PLAYABLE_COLORS[remaining_deck % len(PLAYABLE_COLORS)]
    return PLAYABLE_COLORS[rng.next_uint64() % len(PLAYABLE_COLORS)]
