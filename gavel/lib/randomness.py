"""Injectable random source.

Everything random in a game (team shuffles, topic draws, criterion rolls)
goes through a ``RandomnessProvider`` so tests can pin the outcome.
"""

import random
from typing import Protocol, Sequence, TypeVar

from gavel.config import Settings, get_settings
from gavel.lib.exceptions import InvariantViolationError

T = TypeVar("T")


class RandomnessProvider(Protocol):
    """A uniform integer source."""

    def randbelow(self, n: int) -> int:
        """Return a uniformly chosen integer in ``[0, n)``."""
        ...


class SystemRandomness:
    """``random.Random`` backed provider, optionally seeded."""

    def __init__(self, seed: int | None = None):
        self._random = random.Random(seed)

    def randbelow(self, n: int) -> int:
        if n <= 0:
            raise InvariantViolationError(
                "Cannot pick from an empty range", details={"n": n}
            )
        return self._random.randrange(n)


def shuffle(items: Sequence[T], rng: RandomnessProvider) -> list[T]:
    """
    Return a uniformly shuffled copy of ``items``.

    Fisher-Yates: walk from the last position down to 1 and swap each
    position with a uniformly chosen position at or below it.
    """
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randbelow(i + 1)
        result[i], result[j] = result[j], result[i]
    return result


def choice(items: Sequence[T], rng: RandomnessProvider) -> T:
    """Pick one element uniformly."""
    if not items:
        raise InvariantViolationError("Cannot choose from an empty sequence")
    return items[rng.randbelow(len(items))]


def create_randomness(settings: Settings | None = None) -> RandomnessProvider:
    """Build the default provider from settings."""
    settings = settings or get_settings()
    return SystemRandomness(settings.random_seed)
