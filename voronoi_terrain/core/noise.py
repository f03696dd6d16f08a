"""Seeded coherent noise used for vertex heights."""

from typing import List, Protocol

import numpy as np
from opensimplex import OpenSimplex

# OpenSimplex seeds are signed 64-bit
_SEED_MASK = 0x7FFFFFFFFFFFFFFF


class NoiseSource(Protocol):
    """Deterministic height for a seed and a 2D coordinate."""

    def height(self, seed: int, x: float, y: float) -> float:
        ...


def get_octave_seeds(seed: int, octaves: int) -> List[int]:
    """
    Independent OpenSimplex seeds for each octave of ``seed``.

    The full 64-bit seed is hashed through a NumPy ``SeedSequence``, so no
    two terrain seeds share an octave generator.
    """
    state = np.random.SeedSequence(seed).generate_state(octaves, np.uint64)
    return [int(value) & _SEED_MASK for value in state]


class FbmNoise:
    """
    Fractal Brownian motion over OpenSimplex octaves.

    Each octave samples its own OpenSimplex generator at a higher frequency
    and lower amplitude; the sum is normalised back into ``[-1, 1]``.
    Generators are kept for the most recently used seed only.
    """

    def __init__(self, octaves: int = 6, frequency: float = 1.0,
                 lacunarity: float = 2.0, persistence: float = 0.5):
        if octaves < 1:
            raise ValueError("octaves must be at least 1")
        self.octaves = octaves
        self.frequency = frequency
        self.lacunarity = lacunarity
        self.persistence = persistence
        self._cached = (None, [])

    def _octaves_for(self, seed: int) -> List[OpenSimplex]:
        cached_seed, generators = self._cached
        if cached_seed != seed:
            generators = [
                OpenSimplex(seed=octave_seed)
                for octave_seed in get_octave_seeds(seed, self.octaves)
            ]
            self._cached = (seed, generators)
        return generators

    def height(self, seed: int, x: float, y: float) -> float:
        total = 0.0
        amplitude = 1.0
        max_amplitude = 0.0
        frequency = self.frequency

        for generator in self._octaves_for(seed):
            total += amplitude * generator.noise2(x * frequency, y * frequency)
            max_amplitude += amplitude
            amplitude *= self.persistence
            frequency *= self.lacunarity

        return total / max_amplitude
