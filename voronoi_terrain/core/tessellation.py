"""Voronoi decomposition of a site list.

The decomposition itself comes from ``scipy.spatial.Voronoi``; this module
turns its output into a compact vertex list plus one counter-clockwise cell
per site, and checks the contract the edge builder relies on.
"""

from typing import List, NamedTuple, Protocol, Sequence, Tuple

import numpy as np
import structlog
from scipy.spatial import QhullError, Voronoi

from ..errors import DependencyFailure, InvalidInput, TopologyInconsistency

logger = structlog.get_logger()

Site = Tuple[float, float]


class Decomposition(NamedTuple):
    """Vertex positions and cells, each cell a list of vertex indices."""
    vertices: np.ndarray
    cells: List[List[int]]


class Tessellator(Protocol):
    """Anything that can decompose a site list into cells."""

    def decompose(self, sites: Sequence[Site]) -> Decomposition:
        ...


def get_frame_points(center: Site, radius: float) -> np.ndarray:
    """
    Corners of the square frame around the sites.

    The corners are added as extra sites so that every real site sits
    inside the convex hull and therefore gets a bounded cell.

    Args:
        center: Frame centre
        radius: Half width of the frame

    Returns:
        Array of the four corner coordinates
    """
    cx, cy = center
    return np.array([
        [cx - radius, cy - radius],
        [cx + radius, cy - radius],
        [cx + radius, cy + radius],
        [cx - radius, cy + radius],
    ], dtype=np.float64)


def order_counter_clockwise(cell: Sequence[int], vertices: np.ndarray) -> List[int]:
    """Order a convex cell's vertices counter-clockwise around their mean."""
    points = vertices[list(cell)]
    center = points.mean(axis=0)
    angles = np.arctan2(points[:, 1] - center[1], points[:, 0] - center[0])
    return [int(cell[i]) for i in np.argsort(angles, kind="stable")]


def signed_area(cell: Sequence[int], vertices: np.ndarray) -> float:
    """Shoelace area, positive for counter-clockwise cells."""
    points = vertices[list(cell)]
    x = points[:, 0]
    y = points[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


class ScipyVoronoiTessellator:
    """Decompose sites with Qhull through ``scipy.spatial.Voronoi``."""

    def __init__(self, center: Site = (0.0, 0.0), radius: float = 9999.0):
        self.center = (float(center[0]), float(center[1]))
        self.radius = float(radius)

    def decompose(self, sites: Sequence[Site]) -> Decomposition:
        """
        Build one bounded, counter-clockwise cell per site.

        Args:
            sites: Site coordinates; all must lie inside the frame

        Returns:
            Decomposition with vertices compacted to the ones in use

        Raises:
            InvalidInput: If Qhull merges sites or leaves a site without a
                cell, which happens for near-duplicate sites or sites packed
                far tighter than the frame
            DependencyFailure: If Qhull rejects the input or returns an
                unbounded cell for a real site
        """
        points = np.asarray(sites, dtype=np.float64).reshape(-1, 2)
        n_sites = len(points)
        all_points = np.vstack([points, get_frame_points(self.center, self.radius)])

        try:
            vor = Voronoi(all_points)
        except (QhullError, ValueError) as e:
            raise DependencyFailure(f"Voronoi decomposition failed: {e}") from e

        logger.info("Voronoi diagram calculated",
                    vertices=len(vor.vertices), ridges=len(vor.ridge_points))

        # Qhull drops sites it cannot tell apart; they share a region
        owners = {}
        for point_index, region_index in enumerate(vor.point_region):
            owner = owners.setdefault(int(region_index), point_index)
            if owner != point_index and point_index < n_sites:
                raise InvalidInput(
                    f"Sites {owner} and {point_index} are indistinguishable at this "
                    f"frame scale; use fit_bounds()"
                )

        # Compact to the vertices used by real sites, in order of first use
        remap = {}
        cells = []
        for site_index in range(n_sites):
            region = vor.regions[vor.point_region[site_index]]
            if not region:
                raise InvalidInput(
                    f"Site {site_index} has no cell at this frame scale; use fit_bounds()"
                )
            if -1 in region:
                raise DependencyFailure(
                    f"Site {site_index} produced an unbounded cell"
                )
            cell = []
            for vertex_index in region:
                if vertex_index not in remap:
                    remap[vertex_index] = len(remap)
                cell.append(remap[vertex_index])
            cells.append(cell)

        used = np.empty(len(remap), dtype=np.int64)
        for original, compact in remap.items():
            used[compact] = original
        vertices = vor.vertices[used]

        cells = [order_counter_clockwise(cell, vertices) for cell in cells]

        logger.info("Cells extracted", sites=n_sites, vertices=len(vertices))
        return Decomposition(vertices=vertices, cells=cells)


def validate_decomposition(decomposition: Decomposition) -> None:
    """
    Check the contract every tessellation must honour.

    Each cell needs at least three distinct, in-range vertex indices and a
    strictly positive (counter-clockwise) signed area.

    Raises:
        TopologyInconsistency: On the first violating cell
    """
    vertices = np.asarray(decomposition.vertices, dtype=np.float64)
    n_vertices = len(vertices)

    for cell_index, cell in enumerate(decomposition.cells):
        if len(cell) < 3:
            raise TopologyInconsistency(
                f"Cell {cell_index} has {len(cell)} vertices, at least 3 required"
            )
        for vertex_index in cell:
            if not 0 <= vertex_index < n_vertices:
                raise TopologyInconsistency(
                    f"Cell {cell_index} references missing vertex {vertex_index}"
                )
        if len(set(cell)) != len(cell):
            raise TopologyInconsistency(f"Cell {cell_index} repeats a vertex")
        if signed_area(cell, vertices) <= 0:
            raise TopologyInconsistency(
                f"Cell {cell_index} is not wound counter-clockwise"
            )
