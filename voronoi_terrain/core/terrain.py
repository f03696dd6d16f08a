"""
Voronoi terrain construction.

The builder collects configuration and runs the stages in order:
decomposition, edge and adjacency construction, height and normal synthesis,
then assembly of the terrain and region graphs.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, Field, ValidationError

from ..config import Settings, settings as default_settings
from ..errors import DependencyFailure, InvalidInput, TerrainError
from ..utils.random import MAX_SEED, draw_seed, new_seed_source
from .adjacency import build_edges
from .graph import Graph, Region, TerrainVertex, VoronoiTerrain
from .heights import synthesize_normals, synthesize_positions
from .noise import FbmNoise, NoiseSource
from .sites import get_bounds_for_sites, validate_sites
from .tessellation import (
    Decomposition,
    ScipyVoronoiTessellator,
    Tessellator,
    validate_decomposition,
)

logger = structlog.get_logger()

MAX_U32 = 2**32 - 1


class TerrainConfig(BaseModel):
    """Options for a single terrain build."""

    seed: int = Field(..., ge=0, lt=MAX_SEED, description="Noise seed")
    sites: List[Tuple[float, float]] = Field(default_factory=list, description="Input sites")
    water_level: int = Field(default=50, ge=0, le=MAX_U32, description="Water level")
    height_scale: int = Field(default=100, ge=0, le=MAX_U32,
                              description="Height scale (carried, not applied to heights)")
    bounds_center: Tuple[float, float] = Field(default=(0.0, 0.0), description="Frame centre")
    bounds_radius: float = Field(default=9999.0, gt=0, description="Frame half width")


class VoronoiTerrainBuilder:
    """
    Fluent configuration for a :class:`VoronoiTerrain`.

    Example:
        terrain = (VoronoiTerrainBuilder()
                   .set_seed(42)
                   .set_sites(sites)
                   .build())
    """

    def __init__(self, settings: Optional[Settings] = None,
                 seed_source: Optional[np.random.Generator] = None,
                 tessellator: Optional[Tessellator] = None,
                 noise: Optional[NoiseSource] = None):
        """
        Initialize the builder.

        Args:
            settings: Defaults source, the module settings when omitted
            seed_source: Generator the default seed is drawn from. Each
                builder gets a fresh one when omitted.
            tessellator: Decomposition engine, Qhull through SciPy when omitted
            noise: Height source, fractal OpenSimplex noise when omitted
        """
        self._settings = settings or default_settings
        self._seed_source = seed_source if seed_source is not None else new_seed_source()
        self._tessellator = tessellator
        self._noise = noise or FbmNoise(
            octaves=self._settings.noise_octaves,
            frequency=self._settings.noise_frequency,
            lacunarity=self._settings.noise_lacunarity,
            persistence=self._settings.noise_persistence,
        )
        self._config = TerrainConfig(
            seed=draw_seed(self._seed_source),
            water_level=self._settings.default_water_level,
            height_scale=self._settings.default_height_scale,
            bounds_center=(self._settings.bounds_center_x, self._settings.bounds_center_y),
            bounds_radius=self._settings.bounds_radius,
        )

    @property
    def config(self) -> TerrainConfig:
        return self._config.model_copy(deep=True)

    @property
    def seed(self) -> int:
        return self._config.seed

    def _update(self, **changes) -> "VoronoiTerrainBuilder":
        try:
            self._config = TerrainConfig(**{**self._config.model_dump(), **changes})
        except ValidationError as e:
            raise InvalidInput(str(e)) from e
        return self

    def set_seed(self, seed: int) -> "VoronoiTerrainBuilder":
        return self._update(seed=seed)

    def set_sites(self, sites: Sequence[Tuple[float, float]]) -> "VoronoiTerrainBuilder":
        try:
            sites = [tuple(site) for site in sites]
        except TypeError as e:
            raise InvalidInput(f"Sites must be (x, y) pairs: {e}") from e
        return self._update(sites=sites)

    def set_water_level(self, water_level: int) -> "VoronoiTerrainBuilder":
        return self._update(water_level=water_level)

    def set_height(self, height_scale: int) -> "VoronoiTerrainBuilder":
        return self._update(height_scale=height_scale)

    def set_bounds(self, center: Tuple[float, float], radius: float) -> "VoronoiTerrainBuilder":
        """Square frame handed to the decomposition engine."""
        return self._update(bounds_center=center, bounds_radius=radius)

    def fit_bounds(self, margin: float = 1.0) -> "VoronoiTerrainBuilder":
        """Derive the frame from the bounding box of the configured sites."""
        points = validate_sites(self._config.sites)
        center, radius = get_bounds_for_sites(points, margin)
        return self.set_bounds(center, radius)

    def _check_frame(self, points: np.ndarray) -> None:
        center = np.array(self._config.bounds_center, dtype=np.float64)
        offset = np.abs(points - center).max()
        if offset >= self._config.bounds_radius:
            raise InvalidInput(
                f"Sites extend {offset} from the frame centre, "
                f"beyond the frame radius {self._config.bounds_radius}"
            )

    def build(self) -> VoronoiTerrain:
        """
        Build the terrain.

        Returns:
            Fully assembled VoronoiTerrain

        Raises:
            InvalidInput: Degenerate sites or frame
            TopologyInconsistency: The decomposition breaks its contract
            DependencyFailure: The decomposition engine or noise failed
        """
        config = self._config
        log = logger.bind(seed=config.seed, sites=len(config.sites))
        log.info("Building Voronoi terrain")

        try:
            terrain = self._build(config)
        except TerrainError as e:
            log.error("Terrain build failed", kind=type(e).__name__, error=str(e))
            raise

        log.info("Voronoi terrain built",
                 vertices=len(terrain.terrain_graph.vertices),
                 terrain_edges=len(terrain.terrain_graph.edges),
                 regions=len(terrain.region_graph.vertices),
                 region_edges=len(terrain.region_graph.edges))
        return terrain

    def _build(self, config: TerrainConfig) -> VoronoiTerrain:
        points = validate_sites(config.sites)

        tessellator = self._tessellator
        if tessellator is None:
            self._check_frame(points)
            tessellator = ScipyVoronoiTessellator(config.bounds_center, config.bounds_radius)

        try:
            raw_vertices, raw_cells = tessellator.decompose(
                [(float(x), float(y)) for x, y in points]
            )
            vertices = np.asarray(raw_vertices, dtype=np.float64).reshape(-1, 2)
            cells = [[int(v) for v in cell] for cell in raw_cells]
        except TerrainError:
            raise
        except Exception as e:
            raise DependencyFailure(f"Tessellation failed: {e}") from e

        validate_decomposition(Decomposition(vertices=vertices, cells=cells))

        edge_set = build_edges(cells, len(vertices))

        positions = synthesize_positions(vertices, self._noise, config.seed)
        normals = synthesize_normals(cells, positions)

        terrain_vertices = [
            TerrainVertex(
                position=position,
                normal=np.zeros(3),
                edges=edge_set.edges_by_vertex[i],
            )
            for i, position in enumerate(positions)
        ]

        regions = [
            Region(
                center=np.zeros(3),
                normal=normal,
                edges=edge_set.edges_by_region[i],
            )
            for i, normal in enumerate(normals)
        ]

        return VoronoiTerrain(
            terrain_graph=Graph(vertices=terrain_vertices, edges=edge_set.terrain_edges),
            region_graph=Graph(vertices=regions, edges=edge_set.region_edges),
            water_level=config.water_level,
            dual_edges=edge_set.dual_edges,
        )
