"""
Seed sources for terrain generation.

Every builder owns its own NumPy ``Generator``; there is no module level
random state, so concurrent builds never share a stream.
"""

from typing import Optional

import numpy as np

# Seeds are unsigned 64-bit values.
MAX_SEED = 2**64


def new_seed_source(entropy: Optional[int] = None) -> np.random.Generator:
    """
    Create an independent random generator.

    Args:
        entropy: Optional entropy for a reproducible stream. Fresh OS
            entropy is used when omitted.

    Returns:
        NumPy Generator owned by the caller
    """
    return np.random.default_rng(entropy)


def draw_seed(source: np.random.Generator) -> int:
    """Draw a terrain seed in ``[0, 2**64)`` from ``source``."""
    return int(source.integers(0, MAX_SEED, dtype=np.uint64))
