"""Site generation and checking."""

from typing import Optional, Sequence, Tuple

import numpy as np

from ..errors import InvalidInput
from ..utils.random import new_seed_source

MIN_SITES = 3


def get_jittered_grid(width: float, height: float, spacing: float,
                      seed: Optional[int] = None) -> np.ndarray:
    """
    Generate jittered square grid sites.

    Creates a regular grid with randomized positions to prevent artificial
    patterns while keeping sites evenly spread.

    Args:
        width: Grid width
        height: Grid height
        spacing: Distance between grid points
        seed: Random seed for reproducibility

    Returns:
        Array of [x, y] site coordinates
    """
    if spacing <= 0:
        raise InvalidInput("spacing must be positive")

    rng = new_seed_source(seed)

    radius = spacing / 2  # square radius
    jittering = radius * 0.9  # max deviation
    double_jittering = jittering * 2

    points = []
    y = radius
    while y < height:
        x = radius
        while x < width:
            xj = min(round(x + rng.random() * double_jittering - jittering, 2), width)
            yj = min(round(y + rng.random() * double_jittering - jittering, 2), height)
            points.append([xj, yj])
            x += spacing
        y += spacing

    return np.array(points, dtype=np.float64).reshape(-1, 2)


def get_random_sites(count: int, width: float, height: float,
                     seed: Optional[int] = None) -> np.ndarray:
    """Uniformly distributed sites inside ``[0, width) x [0, height)``."""
    rng = new_seed_source(seed)
    return rng.random((count, 2)) * np.array([width, height], dtype=np.float64)


def validate_sites(sites: Sequence[Tuple[float, float]]) -> np.ndarray:
    """
    Check that sites can form a non-degenerate decomposition.

    Returns:
        (N, 2) float array of the sites

    Raises:
        InvalidInput: Fewer than three sites, non-finite coordinates or
            duplicated sites
    """
    try:
        points = np.asarray(sites, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Sites must be (x, y) pairs: {e}") from e
    if points.size == 0:
        points = points.reshape(0, 2)
    if points.ndim != 2 or points.shape[1] != 2:
        raise InvalidInput(f"Sites must be (x, y) pairs, got shape {points.shape}")

    if len(points) < MIN_SITES:
        raise InvalidInput(f"At least {MIN_SITES} sites are required, got {len(points)}")
    if not np.all(np.isfinite(points)):
        raise InvalidInput("Sites must have finite coordinates")

    unique = np.unique(points, axis=0)
    if len(unique) != len(points):
        raise InvalidInput(f"{len(points) - len(unique)} duplicate sites")

    return points


def get_bounds_for_sites(sites: np.ndarray, margin: float = 1.0) -> Tuple[Tuple[float, float], float]:
    """
    Square frame enclosing ``sites``.

    Args:
        sites: (N, 2) site coordinates
        margin: Fraction of the half extent added around the sites

    Returns:
        Tuple of (center, radius)
    """
    if margin <= 0:
        raise InvalidInput("margin must be positive")
    points = np.asarray(sites, dtype=np.float64).reshape(-1, 2)
    low = points.min(axis=0)
    high = points.max(axis=0)
    center = (low + high) / 2
    half_extent = max(float((high - low).max()) / 2, 1.0)
    radius = half_extent * (1.0 + margin)
    return (float(center[0]), float(center[1])), radius
