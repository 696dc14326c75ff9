import random
from typing import List, MutableSequence, Optional, TypeVar

from .exceptions import ConfigurationError


T = TypeVar("T")


class RandomSource:
    """
    Uniform draws for the solver and the city scatterer.
    The same non-zero seed always produces the same sequence of draws.
    """

    def __init__(self, seed: Optional[int] = None):
        if seed is not None and seed == 0:
            raise ConfigurationError("Seed must be non-zero", {"seed": seed})
        self.seed = seed
        self._random = random.Random(seed)

    def init_state(self, seed: int) -> None:
        if seed == 0:
            raise ConfigurationError("Seed must be non-zero", {"seed": seed})
        self.seed = seed
        self._random.seed(seed)

    def range_int(self, low: int, high: int) -> int:
        """Uniform integer in [low, high)."""
        return self._random.randrange(low, high)

    def range_float(self, low: float, high: float) -> float:
        """Uniform float in [low, high)."""
        return low + (high - low) * self._random.random()

    def value(self) -> float:
        """Uniform float in [0, 1)."""
        return self._random.random()

    def chance(self, percent: float) -> bool:
        return self.value() < percent / 100.0

    def shuffle(self, items: MutableSequence[T]) -> MutableSequence[T]:
        # Fisher-Yates, drawing from this source so shuffles are reproducible.
        n = len(items)
        for i in range(n):
            j = self.range_int(i, n)
            items[i], items[j] = items[j], items[i]
        return items

    def permutation(self, n: int) -> List[int]:
        return self.shuffle(list(range(n)))
