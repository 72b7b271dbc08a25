"""
Random Source Module

This module implements the RandomSource class, the single source of randomness
used by networks, clusters and superclusters. Owning one explicit generator
(instead of the module-level 'random' functions) makes a whole evolutionary run
reproducible from one seed.

Classes:
    RandomSource: Seedable random generator with power-biased sampling
"""

import random


class RandomSource:
    """
    A seedable random generator supporting biased sampling.

    Biased sampling raises a uniform sample in [0, 1) to a 'biasing power':
     + a power between 0 and 1 (0.25, 0.5, ...) biases the result towards 1
     + a power greater than 1 (2.5, 5.0, ...) biases the result towards 0

    Biasing towards 0 is used to favour the front of strength-sorted lists,
    i.e. the strongest networks.

    Public Methods:
        random(bias):             Sample in [0, 1), optionally biased
        between(low, high, bias): Sample in [low, high), optionally biased
        uniform(low, high):       Unbiased sample in [low, high]
        index(n):                 Uniform integer in [0, n)
        biased_index(n, bias):    Integer in [0, n-1], biased towards 0 for bias > 1
        chance(probability):      True with the given probability
    """

    def __init__(self, seed: int | None = None):
        """
        Parameters:
            seed: seed for the underlying generator (None seeds from system entropy)
        """
        self.seed = seed
        self._rng = random.Random(seed)

    def random(self, bias: float = 1.0) -> float:
        return self._rng.random() ** bias

    def between(self, low: float, high: float, bias: float = 1.0) -> float:
        return self.random(bias) * (high - low) + low

    def uniform(self, low: float, high: float) -> float:
        return self._rng.uniform(low, high)

    def index(self, n: int) -> int:
        """Uniform integer in [0, n). 'n' must be positive."""
        return self._rng.randrange(n)

    def biased_index(self, n: int, bias: float) -> int:
        """
        Pick an index into a sequence of length 'n' (n >= 1).

        The sample is rounded to the nearest integer using Python's 'round'
        (round half to even), so both ends of the range are reachable.
        """
        return int(round(self.between(0, n - 1, bias)))

    def chance(self, probability: float) -> bool:
        return self._rng.random() < probability

    def __repr__(self):
        return f"RandomSource(seed={self.seed})"
