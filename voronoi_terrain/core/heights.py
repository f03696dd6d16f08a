"""
Height and normal synthesis.

Lifts the 2D decomposition vertices into 3D using a seeded noise source and
derives one face normal per region.
"""

import math
from typing import List, Sequence, Tuple

import numpy as np
import structlog

from ..errors import DependencyFailure
from .noise import NoiseSource

logger = structlog.get_logger()


def synthesize_positions(vertices: np.ndarray, noise: NoiseSource, seed: int) -> np.ndarray:
    """
    Add a noise height to every vertex.

    Args:
        vertices: (N, 2) vertex coordinates
        noise: Height source
        seed: Noise seed

    Returns:
        (N, 3) array of ``(x, y, height)``

    Raises:
        DependencyFailure: If the noise source raises or returns a
            non-finite height
    """
    vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 2)
    positions = np.zeros((len(vertices), 3), dtype=np.float64)
    positions[:, :2] = vertices

    for i, (x, y) in enumerate(vertices):
        try:
            height = float(noise.height(seed, float(x), float(y)))
        except Exception as e:
            raise DependencyFailure(f"Noise failed at vertex {i} ({x}, {y}): {e}") from e
        if not math.isfinite(height):
            raise DependencyFailure(f"Noise returned {height} at vertex {i} ({x}, {y})")
        positions[i, 2] = height

    low, high = height_range(positions)
    logger.info("Heights synthesized", vertices=len(positions), min_height=low, max_height=high)
    return positions


def region_normal(cell: Sequence[int], positions: np.ndarray) -> np.ndarray:
    """
    Unit normal of the plane through a cell's first three vertices.

    Cells with more than three vertices are rarely planar once heights are
    applied, so this is an approximation of the surface orientation.
    A degenerate cell yields the zero vector.
    """
    p0 = positions[cell[0]]
    e1 = positions[cell[1]] - p0
    e2 = positions[cell[2]] - p0
    normal = np.cross(e1, e2)
    length = np.linalg.norm(normal)
    if length == 0:
        return np.zeros(3, dtype=np.float64)
    return normal / length


def synthesize_normals(cells: Sequence[Sequence[int]], positions: np.ndarray) -> List[np.ndarray]:
    """Face normal for every cell, in cell order."""
    normals = []
    degenerate: List[int] = []
    for region_index, cell in enumerate(cells):
        normal = region_normal(cell, positions)
        if not normal.any():
            degenerate.append(region_index)
        normals.append(normal)

    if degenerate:
        logger.warning("Degenerate region normals", regions=degenerate)
    return normals


def height_range(positions: np.ndarray) -> Tuple[float, float]:
    """Lowest and highest vertex height."""
    if not len(positions):
        return 0.0, 0.0
    return float(positions[:, 2].min()), float(positions[:, 2].max())
