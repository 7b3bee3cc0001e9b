"""Randomness as an explicit dependency.

Anything with a `random()` method returning a float in [0, 1) will do;
`random.Random(seed)` is the usual choice and gives reproducible caves.
"""

import random
from collections.abc import Sequence
from typing import Protocol, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def random(self) -> float: ...


def make_rng(seed: object = None) -> random.Random:
    """Seeded generator; strings, ints and bytes all give stable sequences."""
    return random.Random(seed)


def choose(rng: RandomSource, items: Sequence[T]) -> T:
    """Pick one item uniformly using a single draw."""
    if not items:
        raise IndexError("cannot choose from an empty sequence")
    return items[int(rng.random() * len(items))]
